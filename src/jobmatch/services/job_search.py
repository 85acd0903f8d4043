"""
Job indexing and search service.

Turns job postings into vector store documents and runs semantic and
hybrid searches over them.
"""

import asyncio
from typing import Iterable, Optional, Union

from jobmatch.data.models import Document, JobMetadata, JobPosting, SearchResult
from jobmatch.ml.embeddings import VectorStore
from jobmatch.ml.embeddings.hybrid_scorer import validate_query
from jobmatch.utils.constants import (
    DEFAULT_KEYWORD_BOOST,
    DEFAULT_MIN_SCORE,
    DEFAULT_TOP_K,
    DEFAULT_VECTOR_BOOST,
    HYBRID_DESCRIPTION_LIMIT,
    INDEX_DESCRIPTION_LIMIT,
    JOB_DOCUMENT_PREFIX,
)
from jobmatch.utils.exceptions import InputValidationError
from jobmatch.utils.logger import audit_log, get_logger

logger = get_logger(__name__)


def job_document_id(job_id: Union[int, str]) -> str:
    """Vector store id of an indexed job."""
    return f"{JOB_DOCUMENT_PREFIX}{job_id}"


def build_job_text(
    job: JobPosting,
    description_limit: int = INDEX_DESCRIPTION_LIMIT,
    include_requirements: bool = True,
) -> str:
    """
    Text used to embed a job posting.

    Joins title, company, skills, requirements (unless excluded) and the
    start of the description, skipping empty parts.
    """
    parts = [job.title, job.company, " ".join(job.skills)]
    if include_requirements:
        parts.append(" ".join(job.requirements))
    parts.append(job.description[:description_limit])
    return " ".join(p for p in parts if p)


class JobSearchService:
    """
    Indexes job postings and searches them.

    Usage:
        async with create_vector_store() as store:
            service = JobSearchService(store)
            await service.index_jobs(jobs)
            results = await service.semantic_search("python backend")
    """

    def __init__(self, store: VectorStore):
        self.store = store

    @staticmethod
    def _require_id(job: JobPosting) -> Union[int, str]:
        if job.id is None or str(job.id).strip() == "":
            raise InputValidationError("Job posting needs an id to be indexed", field="id")
        return job.id

    def to_document(
        self,
        job: JobPosting,
        description_limit: int = INDEX_DESCRIPTION_LIMIT,
        include_skills: bool = True,
        include_requirements: bool = True,
    ) -> Document:
        """Build the vector store document for a job posting."""
        job_id = self._require_id(job)
        metadata = JobMetadata(
            job_id=job_id,
            title=job.title,
            company=job.company,
            skills=job.skills,
        ).to_metadata()
        if not include_skills:
            metadata.pop("skills", None)

        return Document(
            id=job_document_id(job_id),
            text=build_job_text(job, description_limit, include_requirements),
            metadata=metadata,
        )

    async def index_job(self, job: JobPosting) -> str:
        """
        Add or replace one job posting in the index.

        Returns:
            The document id the job is stored under
        """
        document = self.to_document(job)
        await self.store.insert(document)
        audit_log("job_indexed", {"job_id": job.id, "document_id": document.id}, audit_type="INDEX")
        return document.id

    async def index_jobs(self, jobs: Iterable[JobPosting]) -> list[str]:
        """Add or replace several job postings in one batch."""
        documents = [self.to_document(job) for job in jobs]
        await self.store.insert_batch(documents)
        logger.info(f"Indexed {len(documents)} jobs")
        audit_log("jobs_indexed", {"count": len(documents)}, audit_type="INDEX")
        return [doc.id for doc in documents]

    async def deindex_job(self, job_id: Union[int, str]) -> None:
        """Remove a job posting from the index."""
        await self.store.delete(job_document_id(job_id))
        audit_log("job_deindexed", {"job_id": job_id}, audit_type="INDEX")

    async def semantic_search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        company: Optional[str] = None,
    ) -> list[SearchResult]:
        """
        Dense search over indexed jobs.

        Args:
            query: Free-text query
            top_k: Maximum number of results
            min_score: Inclusive lower bound on similarity
            company: Only return jobs from this company (case-insensitive)
        """
        filter = None
        if company:
            wanted = company.strip().lower()

            def filter(metadata: dict) -> bool:
                return str(metadata.get("company", "")).strip().lower() == wanted

        results = await self.store.search(query, top_k=top_k, min_score=min_score, filter=filter)
        audit_log(
            "semantic_search",
            {"query": query, "top_k": top_k, "results": len(results)},
            audit_type="SEARCH",
        )
        return results

    async def hybrid_search(
        self,
        query: str,
        jobs: Iterable[JobPosting],
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        keyword_boost: float = DEFAULT_KEYWORD_BOOST,
        vector_boost: float = DEFAULT_VECTOR_BOOST,
    ) -> list[SearchResult]:
        """
        Rank a set of job postings against a query.

        Documents are embedded concurrently before ranking so the dense
        component contributes alongside keyword overlap.
        """
        validate_query(query)
        documents = [
            self.to_document(
                job,
                description_limit=HYBRID_DESCRIPTION_LIMIT,
                include_skills=False,
                include_requirements=False,
            )
            for job in jobs
        ]
        provider = self.store.embedding_provider
        embeddings = await asyncio.gather(*(provider.embed(doc.text) for doc in documents))
        embedded = [doc.with_embedding(e.vector) for doc, e in zip(documents, embeddings)]

        results = await self.store.hybrid_search(
            query,
            embedded,
            top_k=top_k,
            min_score=min_score,
            keyword_boost=keyword_boost,
            vector_boost=vector_boost,
        )
        audit_log(
            "hybrid_search",
            {"query": query, "candidates": len(embedded), "results": len(results)},
            audit_type="SEARCH",
        )
        return results
