"""
Vector store abstraction for storing and searching job embeddings.

Supports an in-process index and two remote vector databases (Pinecone
and Weaviate). The backend is chosen once, when the store is built by
``create_vector_store``; callers only ever see ``VectorStore``.
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from jobmatch.data.models import Document, SearchResult, VectorStoreStats
from jobmatch.utils.config import AppSettings, get_settings
from jobmatch.utils.constants import (
    DEFAULT_KEYWORD_BOOST,
    DEFAULT_MIN_SCORE,
    DEFAULT_TOP_K,
    DEFAULT_VECTOR_BOOST,
    VectorBackend,
)
from jobmatch.utils.exceptions import InputValidationError
from jobmatch.utils.logger import get_logger

from .embedding_model import EmbeddingProvider, get_embedding_model
from .hybrid_scorer import HybridScorer, rank_results, validate_query, validate_top_k

logger = get_logger(__name__)

MetadataFilter = Callable[[dict[str, Any]], bool]


class VectorStore(ABC):
    """
    Abstract base class for vector stores.

    Subclasses persist documents that already carry embeddings and answer
    nearest-neighbour queries; embedding, validation and ranking are
    shared here so every backend returns the same result shapes.
    """

    backend: VectorBackend

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        scorer: Optional[HybridScorer] = None,
    ):
        """
        Initialize the store.

        Args:
            embedding_provider: Provider used for documents and queries
                without embeddings. Defaults to the shared embedding model.
            scorer: Hybrid scorer used by ``hybrid_search``.
        """
        self._embedding_provider = embedding_provider
        self.scorer = scorer or HybridScorer()

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        """Get the embedding provider (lazy initialization)."""
        if self._embedding_provider is None:
            self._embedding_provider = get_embedding_model()
        return self._embedding_provider

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _persist(self, documents: list[Document]) -> None:
        """Store documents that all carry embeddings."""

    @abstractmethod
    async def _query(
        self,
        query_vector: list[float],
        top_k: int,
        filter: Optional[MetadataFilter],
    ) -> list[SearchResult]:
        """Return scored candidates for a query vector."""

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        """Delete a document by ID."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every document from the store."""

    @abstractmethod
    async def count(self) -> int:
        """Get total number of documents in the store."""

    async def close(self) -> None:
        """Release resources held by the store."""

    async def __aenter__(self) -> "VectorStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def insert(self, document: Document) -> None:
        """Embed (if needed) and store a single document."""
        await self.insert_batch([document])

    async def insert_batch(self, documents: Iterable[Document]) -> None:
        """
        Embed (if needed) and store several documents.

        Embedding requests for all documents are issued concurrently. The
        first failure propagates to the caller and nothing from the batch
        is persisted.

        Raises:
            InputValidationError: If a document has a blank id or neither
                text nor embedding.
        """
        documents = list(documents)
        if not documents:
            return

        for doc in documents:
            if not doc.id.strip():
                raise InputValidationError("Document id must not be blank", field="id", value=doc.id)
            if not doc.has_embedding and not doc.text.strip():
                raise InputValidationError(
                    "Document needs text or a precomputed embedding",
                    field="text",
                    value=doc.id,
                )

        embedded = await asyncio.gather(*(self._with_embedding(doc) for doc in documents))
        await self._persist(list(embedded))
        logger.debug(f"Inserted {len(embedded)} documents into {self.backend.display_name} store")

    async def _with_embedding(self, document: Document) -> Document:
        if document.has_embedding:
            return document
        result = await self.embedding_provider.embed(document.text)
        return document.with_embedding(result.vector)

    async def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        filter: Optional[MetadataFilter] = None,
    ) -> list[SearchResult]:
        """
        Dense similarity search over the store's own documents.

        Args:
            query: Query text, embedded with the store's provider.
            top_k: Maximum number of results.
            min_score: Inclusive lower bound on the similarity score.
            filter: Optional predicate over document metadata.

        Returns:
            List of SearchResult objects sorted by similarity.
        """
        validate_query(query)
        validate_top_k(top_k)

        query_embedding = await self.embedding_provider.embed(query)
        candidates = await self._query(query_embedding.vector, top_k, filter)
        return rank_results(candidates, top_k=top_k, min_score=min_score)

    async def hybrid_search(
        self,
        query: str,
        documents: Iterable[Document],
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        keyword_boost: float = DEFAULT_KEYWORD_BOOST,
        vector_boost: float = DEFAULT_VECTOR_BOOST,
    ) -> list[SearchResult]:
        """
        Rank a caller-supplied document set by dense + keyword similarity.

        Documents without an embedding contribute only their keyword score.
        """
        return await self.scorer.rerank(
            query,
            documents,
            self.embedding_provider,
            top_k=top_k,
            min_score=min_score,
            keyword_boost=keyword_boost,
            vector_boost=vector_boost,
        )

    async def stats(self) -> VectorStoreStats:
        """Document count and active backend, for diagnostics."""
        return VectorStoreStats(backend=self.backend, document_count=await self.count())


class InMemoryVectorStore(VectorStore):
    """
    In-process vector store.

    Documents live in a dict keyed by id; searches scan every entry and
    compute cosine similarity, so cost grows with the number of documents.
    All access to the dict goes through a re-entrant lock, and searches
    scan a snapshot taken under it.
    """

    backend = VectorBackend.MEMORY

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        scorer: Optional[HybridScorer] = None,
    ):
        super().__init__(embedding_provider, scorer)
        self._documents: dict[str, Document] = {}
        self._lock = threading.RLock()

    async def _persist(self, documents: list[Document]) -> None:
        with self._lock:
            for doc in documents:
                self._documents[doc.id] = doc

    async def _query(
        self,
        query_vector: list[float],
        top_k: int,
        filter: Optional[MetadataFilter],
    ) -> list[SearchResult]:
        with self._lock:
            snapshot = list(self._documents.values())

        similarity = self.embedding_provider.cosine_similarity
        results = []
        for doc in snapshot:
            if filter is not None and not filter(doc.metadata):
                continue
            results.append(SearchResult(
                id=doc.id,
                score=similarity(query_vector, doc.embedding or []),
                metadata=doc.metadata,
                text=doc.text,
            ))
        return results

    async def delete(self, doc_id: str) -> None:
        """Delete a document by ID; unknown ids are ignored."""
        with self._lock:
            removed = self._documents.pop(doc_id, None)
        if removed is not None:
            logger.debug(f"Deleted document {doc_id}")

    async def clear(self) -> None:
        """Clear all documents from the index."""
        with self._lock:
            self._documents.clear()
        logger.info("Cleared in-memory vector store")

    async def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def get(self, ids: list[str]) -> list[Document]:
        """Get stored documents by ID, skipping unknown ids."""
        with self._lock:
            return [self._documents[i] for i in ids if i in self._documents]


def create_vector_store(
    embedding_provider: Optional[EmbeddingProvider] = None,
    settings: Optional[AppSettings] = None,
    backend: Optional[VectorBackend] = None,
) -> VectorStore:
    """
    Factory function to build the configured vector store.

    Args:
        embedding_provider: Provider for document and query embeddings.
        settings: Application settings. Defaults to the global settings.
        backend: Force a backend instead of resolving it from settings.

    Returns:
        VectorStore instance.
    """
    settings = settings or get_settings()
    backend = backend or settings.resolve_vector_backend()

    if backend == VectorBackend.PINECONE:
        from .remote_stores import PineconeVectorStore

        store: VectorStore = PineconeVectorStore(
            embedding_provider=embedding_provider,
            settings=settings.pinecone,
            timeout=settings.vector_store.request_timeout,
        )
    elif backend == VectorBackend.WEAVIATE:
        from .remote_stores import WeaviateVectorStore

        store = WeaviateVectorStore(
            embedding_provider=embedding_provider,
            settings=settings.weaviate,
            timeout=settings.vector_store.request_timeout,
        )
    else:
        store = InMemoryVectorStore(embedding_provider=embedding_provider)

    logger.info(f"Using {backend.display_name} vector store")
    return store
