"""
Vector document data models.

Defines the documents held by the vector store, the search results it
returns, and the metadata schema used for indexed job postings.
"""

from typing import Any, Optional, Union

from pydantic import Field

from jobmatch.utils.constants import VectorBackend

from .base import EmbeddedModel


class Document(EmbeddedModel):
    """A piece of text indexed for dense and hybrid search."""

    id: str
    text: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: Optional[list[float]] = None

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def with_embedding(self, embedding: list[float]) -> "Document":
        """Return a copy carrying the given embedding."""
        return self.model_copy(update={"embedding": list(embedding)})


class SearchResult(EmbeddedModel):
    """Result from a dense or hybrid similarity search."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)
    text: str = ""


class JobMetadata(EmbeddedModel):
    """Metadata attached to an indexed job posting."""

    job_id: Union[int, str] = Field(..., alias="jobId")
    title: str
    company: str
    skills: list[str] = Field(default_factory=list)

    def to_metadata(self) -> dict[str, Any]:
        """Serialize with camelCase keys, as stored in the index."""
        return self.model_dump(by_alias=True)


class VectorStoreStats(EmbeddedModel):
    """Diagnostics for the active vector store."""

    backend: VectorBackend
    document_count: int = Field(0, ge=0)

    @property
    def external(self) -> bool:
        return self.backend.is_external

    @property
    def backend_name(self) -> str:
        return self.backend.display_name
