"""
Tests for jobmatch.services.job_search: job indexing and search pipeline.
"""

import pytest

from jobmatch.services.job_search import JobSearchService, build_job_text, job_document_id
from jobmatch.utils.exceptions import InputValidationError


@pytest.fixture
def service(memory_store):
    return JobSearchService(memory_store)


@pytest.fixture
def jobs(make_job):
    return [
        make_job(id=1, title="Python Engineer", company="Acme", skills=["python", "django"],
                 description="Build backend services in python."),
        make_job(id=2, title="Frontend Developer", company="Globex", skills=["react", "javascript"],
                 description="Build frontend apps in react."),
        make_job(id=3, title="Data Engineer", company="Acme", skills=["python", "spark"],
                 description="Own the data platform."),
    ]


# ── build_job_text ───────────────────────────────────────────────────────────


class TestBuildJobText:
    def test_concatenates_fields(self, make_job):
        job = make_job(
            title="Engineer",
            company="Acme",
            skills=["python", "sql"],
            requirements=["5 years", "degree"],
            description="Great role",
        )
        assert build_job_text(job) == "Engineer Acme python sql 5 years degree Great role"

    def test_description_truncated(self, make_job):
        job = make_job(title="T", company="C", skills=[], description="x" * 2000)
        assert build_job_text(job).count("x") == 1000
        assert build_job_text(job, description_limit=500).count("x") == 500

    def test_empty_parts_skipped(self, make_job):
        job = make_job(title="T", company="", skills=[])
        assert build_job_text(job) == "T"

    def test_requirements_excluded(self, make_job):
        job = make_job(title="T", company="C", skills=["go"], requirements=["degree"], description="d")
        assert build_job_text(job, include_requirements=False) == "T C go d"


def test_job_document_id():
    assert job_document_id(42) == "job:42"
    assert job_document_id("abc") == "job:abc"


# ── to_document ──────────────────────────────────────────────────────────────


class TestToDocument:
    def test_metadata(self, service, make_job):
        doc = service.to_document(make_job(id=7, title="Engineer", company="Acme", skills=["go"]))
        assert doc.id == "job:7"
        assert doc.metadata == {"jobId": 7, "title": "Engineer", "company": "Acme", "skills": ["go"]}
        assert doc.embedding is None

    def test_without_skills(self, service, make_job):
        doc = service.to_document(make_job(id=7), include_skills=False)
        assert "skills" not in doc.metadata

    def test_requires_id(self, service, make_job):
        with pytest.raises(InputValidationError):
            service.to_document(make_job(id=None))


# ── indexing ─────────────────────────────────────────────────────────────────


class TestIndexing:
    @pytest.mark.asyncio
    async def test_index_job(self, service, memory_store, jobs):
        doc_id = await service.index_job(jobs[0])

        assert doc_id == "job:1"
        [stored] = memory_store.get(["job:1"])
        assert stored.metadata["title"] == "Python Engineer"
        assert stored.embedding is not None

    @pytest.mark.asyncio
    async def test_index_jobs(self, service, memory_store, jobs):
        ids = await service.index_jobs(jobs)

        assert ids == ["job:1", "job:2", "job:3"]
        assert await memory_store.count() == 3

    @pytest.mark.asyncio
    async def test_reindex_replaces(self, service, memory_store, jobs, make_job):
        await service.index_job(jobs[0])
        await service.index_job(make_job(id=1, title="Renamed", company="Acme"))

        assert await memory_store.count() == 1
        [stored] = memory_store.get(["job:1"])
        assert stored.metadata["title"] == "Renamed"

    @pytest.mark.asyncio
    async def test_deindex(self, service, memory_store, jobs):
        await service.index_jobs(jobs)
        await service.deindex_job(2)

        assert memory_store.get(["job:2"]) == []
        results = await service.semantic_search("frontend react developer")
        assert all(r.id != "job:2" for r in results)


# ── search ───────────────────────────────────────────────────────────────────


class TestSemanticSearch:
    @pytest.mark.asyncio
    async def test_best_match_first(self, service, jobs):
        await service.index_jobs(jobs)

        results = await service.semantic_search("react frontend")

        assert results[0].id == "job:2"
        assert results[0].metadata["company"] == "Globex"

    @pytest.mark.asyncio
    async def test_company_filter(self, service, jobs):
        await service.index_jobs(jobs)

        results = await service.semantic_search("python", company=" acme ")

        assert {r.id for r in results} == {"job:1", "job:3"}

    @pytest.mark.asyncio
    async def test_top_k(self, service, jobs):
        await service.index_jobs(jobs)
        assert len(await service.semantic_search("engineer", top_k=1)) == 1


class TestHybridSearch:
    @pytest.mark.asyncio
    async def test_ranks_supplied_jobs(self, service, memory_store, jobs):
        results = await service.hybrid_search("python backend", jobs)

        assert results[0].id == "job:1"
        assert await memory_store.count() == 0

    @pytest.mark.asyncio
    async def test_documents_are_embedded(self, service, fake_embedder, jobs):
        await service.hybrid_search("python", jobs)
        # One embedding per job plus the query
        assert len(fake_embedder.calls) == len(jobs) + 1

    @pytest.mark.asyncio
    async def test_dense_component_contributes(self, service, jobs):
        results = await service.hybrid_search("python", jobs, keyword_boost=0.0, vector_boost=1.0)
        assert results[0].score > 0.0

    @pytest.mark.asyncio
    async def test_documents_leave_out_requirements(self, service, fake_embedder, make_job):
        job = make_job(id=9, title="T", company="C", skills=["go"], requirements=["degree"])
        await service.hybrid_search("go", [job])
        assert "T C go" in fake_embedder.calls
        assert not any("degree" in text for text in fake_embedder.calls)

    @pytest.mark.asyncio
    async def test_metadata_has_no_skills(self, service, jobs):
        results = await service.hybrid_search("python", jobs)
        assert set(results[0].metadata) == {"jobId", "title", "company"}

    @pytest.mark.asyncio
    async def test_blank_query(self, service, fake_embedder, jobs):
        with pytest.raises(InputValidationError):
            await service.hybrid_search("  ", jobs)
        assert fake_embedder.calls == []
