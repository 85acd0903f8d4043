"""
Match result data models.

Defines the computed (never persisted) result of matching a candidate
against a job posting, whichever path produced it.
"""

import math
from typing import Any, Optional

from pydantic import Field

from jobmatch.utils.constants import MatchScoreLevel, MatchSource
from jobmatch.utils.exceptions import MalformedResponseError

from .base import EmbeddedModel


def score_from_confidence(confidence: float) -> int:
    """Convert a 0-1 confidence to a 0-100 score, rounding halves up."""
    return int(math.floor(confidence * 100 + 0.5))


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _payload_number(payload: dict[str, Any], key: str) -> float:
    """Read a numeric field; missing or null values default to zero."""
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise MalformedResponseError(f"Field '{key}' must be numeric, got boolean", service="generative")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"Field '{key}' must be numeric, got {value!r}", service="generative", cause=e
        ) from e
    if math.isnan(number):
        raise MalformedResponseError(f"Field '{key}' is NaN", service="generative")
    return number


class MatchBreakdown(EmbeddedModel):
    """Per-factor scores behind an algorithmic match."""

    skill_match: float = Field(0.0, ge=0, le=1)
    location_match: float = Field(0.0, ge=0, le=1)
    work_type_match: float = Field(0.0, ge=0, le=1)
    salary_match: float = Field(0.0, ge=0, le=1)


class MatchResult(EmbeddedModel):
    """Compatibility of one candidate with one job posting."""

    confidence_level: float = Field(0.0, ge=0, le=1, alias="confidenceLevel")
    skill_matches: list[str] = Field(default_factory=list, alias="skillMatches")
    explanation: str = ""
    score: int = Field(0, ge=0, le=100)
    source: MatchSource = MatchSource.ALGORITHMIC
    breakdown: Optional[MatchBreakdown] = None

    @property
    def score_level(self) -> MatchScoreLevel:
        return MatchScoreLevel.from_score(self.confidence_level)

    @classmethod
    def from_generative(cls, payload: Any) -> "MatchResult":
        """
        Build a result from a generative service's JSON payload.

        Confidence and score are clamped independently into range and
        missing fields default to empty values.

        Raises:
            MalformedResponseError: If the payload is not an object or a
                field has the wrong type.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(payload).__name__}", service="generative"
            )

        confidence = _clamp(_payload_number(payload, "confidenceLevel"), 0.0, 1.0)
        score = _clamp(_payload_number(payload, "score"), 0.0, 100.0)

        skills = payload.get("skillMatches")
        if skills is None:
            skills = []
        if not isinstance(skills, list):
            raise MalformedResponseError("Field 'skillMatches' must be an array", service="generative")

        explanation = payload.get("explanation")
        if explanation is None:
            explanation = payload.get("aiExplanation")
        if explanation is None:
            explanation = ""
        if not isinstance(explanation, str):
            raise MalformedResponseError("Field 'explanation' must be a string", service="generative")

        return cls(
            confidence_level=confidence,
            skill_matches=[str(s) for s in skills if s is not None],
            explanation=explanation,
            score=int(math.floor(score + 0.5)),
            source=MatchSource.GENERATIVE,
        )
