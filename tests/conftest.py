"""
Shared test fixtures for the JobMatch test suite.

Sets environment variables before any jobmatch imports so no remote
service is ever configured, then provides a deterministic embedding
provider and factory fixtures for profiles, postings and documents.
"""

import os

# === Set environment BEFORE any jobmatch imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ["LOG_FILE_OUTPUT"] = "false"
os.environ["VECTOR_PROVIDER"] = "auto"
for _var in (
    "PINECONE_API_KEY",
    "PINECONE_ENVIRONMENT",
    "PINECONE_HOST",
    "WEAVIATE_URL",
    "WEAVIATE_API_KEY",
    "OPENAI_API_KEY",
):
    os.environ.pop(_var, None)

from typing import Any, Optional, Sequence

import pytest

from jobmatch.core.matching import MatchingEngine
from jobmatch.data.models import CandidateProfile, Document, JobPosting
from jobmatch.ml.embeddings import (
    EmbeddingResult,
    HybridScorer,
    InMemoryVectorStore,
    cosine_similarity,
)
from jobmatch.utils.config import AppSettings

# Each vocabulary word is one dimension of the fake embedding space
VOCABULARY = (
    "python", "javascript", "react", "node", "java", "django", "backend",
    "frontend", "engineer", "developer", "data", "remote", "senior", "cloud",
)


class FakeEmbeddingProvider:
    """
    Deterministic bag-of-words embedder.

    Texts listed in ``vectors`` get that exact vector; anything else gets
    word counts over VOCABULARY. Texts in ``fail_on`` raise ``error``.
    """

    def __init__(
        self,
        vectors: Optional[dict[str, list[float]]] = None,
        fail_on: Optional[set[str]] = None,
        error: Optional[Exception] = None,
    ):
        self.vectors = vectors or {}
        self.fail_on = fail_on or set()
        self.error = error or RuntimeError("embedding failed")
        self.calls: list[str] = []

    def vector_for(self, text: str) -> list[float]:
        if text in self.vectors:
            return list(self.vectors[text])
        words = text.lower().split()
        return [float(sum(1 for w in words if vocab in w)) for vocab in VOCABULARY]

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        if text in self.fail_on:
            raise self.error
        vector = self.vector_for(text)
        return EmbeddingResult(vector=vector, dimension=len(vector))

    def cosine_similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        return cosine_similarity(a, b)


# ---------------------------------------------------------------------------
# Embedding and store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_embedder():
    return FakeEmbeddingProvider()


@pytest.fixture
def memory_store(fake_embedder):
    """In-process store wired to the fake embedder."""
    return InMemoryVectorStore(embedding_provider=fake_embedder)


@pytest.fixture
def hybrid_scorer():
    return HybridScorer()


@pytest.fixture
def test_settings():
    """Settings with no remote service configured, independent of the process env."""
    return AppSettings(_env_file=None)


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_candidate():
    """Factory that returns a callable to build CandidateProfile models."""

    def _factory(
        skills: Optional[list[str]] = None,
        experience: str = "5 years building web services",
        **kwargs: Any,
    ) -> CandidateProfile:
        return CandidateProfile(
            skills=skills if skills is not None else ["python", "django"],
            experience=experience,
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_job():
    """Factory that returns a callable to build JobPosting models."""

    def _factory(
        id: Any = 1,
        title: str = "Backend Engineer",
        company: str = "Acme",
        skills: Optional[list[str]] = None,
        **kwargs: Any,
    ) -> JobPosting:
        return JobPosting(
            id=id,
            title=title,
            company=company,
            skills=skills if skills is not None else ["python", "django"],
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_document():
    """Factory that returns a callable to build Document models."""

    def _factory(
        id: str = "doc-1",
        text: str = "",
        embedding: Optional[list[float]] = None,
        **metadata: Any,
    ) -> Document:
        return Document(id=id, text=text, embedding=embedding, metadata=metadata)

    return _factory


# ---------------------------------------------------------------------------
# Matching engine fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def matching_engine():
    """MatchingEngine with the default factor weights."""
    return MatchingEngine()
