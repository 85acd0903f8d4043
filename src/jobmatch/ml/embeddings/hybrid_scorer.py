"""
Hybrid (dense + keyword) ranking.

Combines the cosine similarity of a query embedding with a sparse
keyword-overlap score. Used by every vector store for hybrid search and
on its own to re-rank a caller-supplied set of documents.
"""

from typing import Callable, Iterable, Optional, Sequence

from jobmatch.data.models import Document, SearchResult
from jobmatch.utils.constants import (
    DEFAULT_KEYWORD_BOOST,
    DEFAULT_MIN_SCORE,
    DEFAULT_TOP_K,
    DEFAULT_VECTOR_BOOST,
    KEYWORD_MIN_TERM_LENGTH,
)
from jobmatch.utils.exceptions import InputValidationError

from .embedding_model import EmbeddingProvider, cosine_similarity

SimilarityFn = Callable[[Sequence[float], Sequence[float]], float]


def validate_query(query: str) -> str:
    """Reject empty or blank queries."""
    if not isinstance(query, str) or not query.strip():
        raise InputValidationError("Search query must not be empty", field="query", value=query)
    return query


def validate_top_k(top_k: int) -> int:
    if top_k < 1:
        raise InputValidationError("top_k must be at least 1", field="top_k", value=top_k)
    return top_k


def rank_results(
    results: Iterable[SearchResult],
    top_k: int = DEFAULT_TOP_K,
    min_score: float = DEFAULT_MIN_SCORE,
) -> list[SearchResult]:
    """
    Apply the shared ranking policy to scored results.

    Drops results scoring below ``min_score`` (inclusive bound), sorts by
    score descending with ties ordered by id, and keeps at most ``top_k``.
    """
    kept = [r for r in results if r.score >= min_score]
    kept.sort(key=lambda r: (-r.score, r.id))
    return kept[:top_k]


class HybridScorer:
    """
    Scores documents by a weighted sum of vector and keyword similarity.

    final = vector_score * vector_boost + keyword_score * keyword_boost
    """

    def __init__(
        self,
        similarity: SimilarityFn = cosine_similarity,
        min_term_length: int = KEYWORD_MIN_TERM_LENGTH,
    ):
        self.similarity = similarity
        self.min_term_length = min_term_length

    def query_terms(self, query: str) -> list[str]:
        """Lower-cased whitespace tokens longer than the minimum term length."""
        return [t for t in query.lower().split() if len(t) > self.min_term_length]

    def keyword_score(self, query: str, text: str) -> float:
        """
        Fraction of query terms found as substrings of the text.

        Matching is case-insensitive. Returns 0 when the query has no
        terms long enough to count.
        """
        return self._keyword_score(self.query_terms(query), text.lower())

    @staticmethod
    def _keyword_score(terms: list[str], text_lower: str) -> float:
        if not terms:
            return 0.0
        matches = sum(1 for term in terms if term in text_lower)
        return matches / len(terms)

    def vector_score(self, query_vector: Sequence[float], document: Document) -> float:
        if not document.embedding:
            return 0.0
        return self.similarity(query_vector, document.embedding)

    def score_documents(
        self,
        query: str,
        query_vector: Sequence[float],
        documents: Iterable[Document],
        keyword_boost: float = DEFAULT_KEYWORD_BOOST,
        vector_boost: float = DEFAULT_VECTOR_BOOST,
    ) -> list[SearchResult]:
        """Score every document without filtering or ordering."""
        terms = self.query_terms(query)
        scored = []
        for doc in documents:
            vector_score = self.vector_score(query_vector, doc)
            keyword_score = self._keyword_score(terms, doc.text.lower())
            scored.append(SearchResult(
                id=doc.id,
                score=vector_score * vector_boost + keyword_score * keyword_boost,
                metadata=doc.metadata,
                text=doc.text,
            ))
        return scored

    def rank(
        self,
        query: str,
        query_vector: Sequence[float],
        documents: Iterable[Document],
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        keyword_boost: float = DEFAULT_KEYWORD_BOOST,
        vector_boost: float = DEFAULT_VECTOR_BOOST,
    ) -> list[SearchResult]:
        """
        Rank documents against a query whose embedding is already known.

        Returns:
            At most ``top_k`` results scoring at least ``min_score``,
            highest score first.
        """
        validate_top_k(top_k)
        scored = self.score_documents(
            query,
            query_vector,
            documents,
            keyword_boost=keyword_boost,
            vector_boost=vector_boost,
        )
        return rank_results(scored, top_k=top_k, min_score=min_score)

    async def rerank(
        self,
        query: str,
        documents: Iterable[Document],
        embedding_provider: EmbeddingProvider,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        keyword_boost: float = DEFAULT_KEYWORD_BOOST,
        vector_boost: float = DEFAULT_VECTOR_BOOST,
        query_vector: Optional[Sequence[float]] = None,
    ) -> list[SearchResult]:
        """Embed the query (unless given) and rank the documents."""
        validate_query(query)
        validate_top_k(top_k)
        if query_vector is None:
            query_vector = (await embedding_provider.embed(query)).vector
        return self.rank(
            query,
            query_vector,
            documents,
            top_k=top_k,
            min_score=min_score,
            keyword_boost=keyword_boost,
            vector_boost=vector_boost,
        )
