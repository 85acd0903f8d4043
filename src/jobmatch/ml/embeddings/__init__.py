"""
Document embedding, vector storage, and similarity search.

This module provides semantic retrieval over job text for the JobMatch
engine.

Components:
- EmbeddingModel: Wrapper for sentence-transformers models
- VectorStore: Abstraction over in-memory, Pinecone and Weaviate storage
- HybridScorer: Dense + keyword ranking of document sets
"""

from .embedding_model import (
    EmbeddingModel,
    EmbeddingProvider,
    EmbeddingResult,
    cosine_similarity,
    get_embedding_model,
)

from .hybrid_scorer import (
    HybridScorer,
    rank_results,
)

from .vector_store import (
    VectorStore,
    InMemoryVectorStore,
    create_vector_store,
)

from .remote_stores import (
    PineconeVectorStore,
    WeaviateVectorStore,
)

__all__ = [
    # Embedding model
    "EmbeddingModel",
    "EmbeddingProvider",
    "EmbeddingResult",
    "cosine_similarity",
    "get_embedding_model",
    # Ranking
    "HybridScorer",
    "rank_results",
    # Vector stores
    "VectorStore",
    "InMemoryVectorStore",
    "PineconeVectorStore",
    "WeaviateVectorStore",
    "create_vector_store",
]
