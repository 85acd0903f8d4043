"""
Application-wide constants for the JobMatch engine.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "JobMatch"
APP_DISPLAY_NAME: Final[str] = "JobMatch Matching & Search Engine"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Match Scoring Constants
# =============================================================================

# Factor weights for the algorithmic match score (sum to 1.0)
MATCH_WEIGHTS: Final[dict[str, float]] = {
    "skills": 0.5,
    "location": 0.2,
    "work_type": 0.2,
    "salary": 0.1,
}

LOCATION_SCORES: Final[dict[str, float]] = {
    "contained": 1.0,
    "different": 0.5,
    "unknown": 0.7,
}

WORK_TYPE_SCORES: Final[dict[str, float]] = {
    "same": 1.0,
    "different": 0.6,
    "unknown": 0.8,
}

SALARY_SCORES: Final[dict[str, float]] = {
    "fits": 1.0,
    "above_range": 0.3,
    "unknown": 0.8,
}

# Score thresholds (on the 0-1 confidence scale)
SCORE_THRESHOLDS: Final[dict[str, float]] = {
    "excellent": 0.85,
    "good": 0.70,
    "fair": 0.50,
    "poor": 0.30,
}

# Returned by insight generation when no generative service answers
DEFAULT_CAREER_INSIGHTS: Final[tuple[str, ...]] = (
    "Consider adding more technical skills to your profile to increase match opportunities.",
    "Remote work opportunities have increased significantly in your field.",
    "Your skill set is well-aligned with current market demands.",
)


# =============================================================================
# Search Constants
# =============================================================================

DEFAULT_TOP_K: Final[int] = 10
DEFAULT_MIN_SCORE: Final[float] = 0.0
DEFAULT_KEYWORD_BOOST: Final[float] = 0.3
DEFAULT_VECTOR_BOOST: Final[float] = 0.7

# Query terms must be longer than this to count for keyword scoring
KEYWORD_MIN_TERM_LENGTH: Final[int] = 2

# Characters of the job description included in indexed / re-ranked text
INDEX_DESCRIPTION_LIMIT: Final[int] = 1000
HYBRID_DESCRIPTION_LIMIT: Final[int] = 500

JOB_DOCUMENT_PREFIX: Final[str] = "job:"


# =============================================================================
# Enums
# =============================================================================


class VectorBackend(str, Enum):
    """Storage variants behind the vector store interface."""

    PINECONE = "pinecone"
    WEAVIATE = "weaviate"
    MEMORY = "memory"

    @property
    def is_external(self) -> bool:
        return self is not VectorBackend.MEMORY

    @property
    def display_name(self) -> str:
        return {
            VectorBackend.PINECONE: "Pinecone",
            VectorBackend.WEAVIATE: "Weaviate",
            VectorBackend.MEMORY: "In-Memory",
        }[self]


class MatchScoreLevel(Enum):
    """Categorical levels for match scores."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "MatchScoreLevel":
        """Convert a numeric score to a level."""
        if score >= SCORE_THRESHOLDS["excellent"]:
            return cls.EXCELLENT
        elif score >= SCORE_THRESHOLDS["good"]:
            return cls.GOOD
        elif score >= SCORE_THRESHOLDS["fair"]:
            return cls.FAIR
        return cls.POOR


class MatchSource(str, Enum):
    """Which path produced a match result."""

    ALGORITHMIC = "algorithmic"
    GENERATIVE = "generative"
