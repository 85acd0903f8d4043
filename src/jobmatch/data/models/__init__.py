"""
Pydantic data models for the JobMatch engine.

Exports:
- Vector documents: Document, SearchResult, JobMetadata, VectorStoreStats
- Matching inputs: CandidateProfile, JobPosting
- Matching output: MatchResult, MatchBreakdown
"""

from .base import EmbeddedModel
from .document import Document, JobMetadata, SearchResult, VectorStoreStats
from .match import MatchBreakdown, MatchResult, score_from_confidence
from .profile import CandidateProfile, JobPosting

__all__ = [
    "EmbeddedModel",
    # Documents
    "Document",
    "JobMetadata",
    "SearchResult",
    "VectorStoreStats",
    # Profiles
    "CandidateProfile",
    "JobPosting",
    # Matches
    "MatchBreakdown",
    "MatchResult",
    "score_from_confidence",
]
