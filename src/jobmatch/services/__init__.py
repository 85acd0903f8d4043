"""
Application services: job indexing/search and the generative matching client.
"""

from .job_search import JobSearchService, build_job_text, job_document_id
from .openai_matcher import OpenAIMatchService

__all__ = [
    "JobSearchService",
    "build_job_text",
    "job_document_id",
    "OpenAIMatchService",
]
