"""
Candidate-Job matching engine.

Scores a candidate profile against a job posting from structured fields
only: skills overlap, location, work type and salary. The result is fully
deterministic and needs no network access, so it serves both as the
baseline score and as the fallback when a generative matcher fails.
"""

from typing import Optional

from jobmatch.data.models import (
    CandidateProfile,
    JobPosting,
    MatchBreakdown,
    MatchResult,
    score_from_confidence,
)
from jobmatch.utils.constants import (
    LOCATION_SCORES,
    MATCH_WEIGHTS,
    SALARY_SCORES,
    WORK_TYPE_SCORES,
    MatchScoreLevel,
    MatchSource,
)
from jobmatch.utils.logger import get_logger

logger = get_logger(__name__)


def _normalize_skills(skills: list[str]) -> list[str]:
    """Lower-case, strip and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for skill in skills:
        normalized = skill.strip().lower()
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class MatchingEngine:
    """
    Engine for scoring candidates against job postings.

    Uses four weighted factors:
    - Skills matching (bidirectional substring containment)
    - Location containment
    - Work type equality
    - Salary expectation vs. offered maximum
    """

    def __init__(self, weights: Optional[dict[str, float]] = None):
        """
        Initialize the matching engine.

        Args:
            weights: Optional custom factor weights
        """
        self.weights = dict(weights or MATCH_WEIGHTS)

    def score(self, candidate: CandidateProfile, job: JobPosting) -> MatchResult:
        """
        Match a candidate profile against a job posting.

        Args:
            candidate: Candidate profile
            job: Job posting

        Returns:
            MatchResult with confidence, 0-100 score, matched skills
            and explanation
        """
        matched_skills, skill_score = self._match_skills(candidate.skills, job.skills)
        breakdown = MatchBreakdown(
            skill_match=skill_score,
            location_match=self._match_location(candidate.location, job.location),
            work_type_match=self._match_work_type(candidate.work_type, job.work_type),
            salary_match=self._match_salary(candidate.salary_min, job.salary_max),
        )

        confidence = round(self._weighted_confidence(breakdown), 4)
        result = MatchResult(
            confidence_level=confidence,
            skill_matches=matched_skills,
            score=score_from_confidence(confidence),
            source=MatchSource.ALGORITHMIC,
            breakdown=breakdown,
        )
        result.explanation = self._generate_explanation(result, breakdown, job)

        logger.debug(
            f"Algorithmic match for {job.display_title}: score={result.score} "
            f"skills={len(matched_skills)}/{len(job.skills)}"
        )
        return result

    def _match_skills(
        self,
        candidate_skills: list[str],
        job_skills: list[str],
    ) -> tuple[list[str], float]:
        """
        Find candidate skills that overlap a job skill.

        A candidate skill matches when it contains a job skill or is
        contained by one, so "java" and "javascript" match each other.
        """
        candidate = _normalize_skills(candidate_skills)
        required = _normalize_skills(job_skills)

        matched = [
            skill for skill in candidate
            if any(skill in job_skill or job_skill in skill for job_skill in required)
        ]

        if not required:
            return matched, 0.0

        # Several candidate skills can hit the same job skill
        return matched, min(1.0, len(matched) / len(required))

    def _match_location(
        self,
        candidate_location: Optional[str],
        job_location: Optional[str],
    ) -> float:
        """Candidate location containing the job location is a full match."""
        candidate_loc = _normalize_text(candidate_location)
        job_loc = _normalize_text(job_location)

        if candidate_loc is None or job_loc is None:
            return LOCATION_SCORES["unknown"]
        if job_loc in candidate_loc:
            return LOCATION_SCORES["contained"]
        return LOCATION_SCORES["different"]

    def _match_work_type(
        self,
        candidate_work_type: Optional[str],
        job_work_type: Optional[str],
    ) -> float:
        candidate_type = _normalize_text(candidate_work_type)
        job_type = _normalize_text(job_work_type)

        if candidate_type is None or job_type is None:
            return WORK_TYPE_SCORES["unknown"]
        if candidate_type == job_type:
            return WORK_TYPE_SCORES["same"]
        return WORK_TYPE_SCORES["different"]

    def _match_salary(
        self,
        candidate_min: Optional[float],
        job_max: Optional[float],
    ) -> float:
        """The candidate's minimum must not exceed the job's maximum."""
        if candidate_min is None or job_max is None:
            return SALARY_SCORES["unknown"]
        if candidate_min <= job_max:
            return SALARY_SCORES["fits"]
        return SALARY_SCORES["above_range"]

    def _weighted_confidence(self, breakdown: MatchBreakdown) -> float:
        confidence = (
            breakdown.skill_match * self.weights["skills"]
            + breakdown.location_match * self.weights["location"]
            + breakdown.work_type_match * self.weights["work_type"]
            + breakdown.salary_match * self.weights["salary"]
        )
        return max(0.0, min(1.0, confidence))

    def _generate_explanation(
        self,
        result: MatchResult,
        breakdown: MatchBreakdown,
        job: JobPosting,
    ) -> str:
        """Generate human-readable explanation of the match."""
        level = result.score_level
        if level == MatchScoreLevel.EXCELLENT:
            summary = f"Excellent match for {job.display_title}."
        elif level == MatchScoreLevel.GOOD:
            summary = f"Good match for {job.display_title}."
        elif level == MatchScoreLevel.FAIR:
            summary = f"Fair match for {job.display_title}."
        else:
            summary = f"Limited match for {job.display_title}."

        percentage = round(breakdown.skill_match * 100)
        if result.skill_matches:
            skills_part = (
                f"Matches {percentage}% of the required skills: "
                f"{', '.join(result.skill_matches)}."
            )
        else:
            skills_part = f"Matches {percentage}% of the required skills; no overlapping skills found."

        parts = [summary, skills_part]
        if breakdown.location_match == LOCATION_SCORES["contained"]:
            parts.append("Location is a perfect match.")
        if breakdown.work_type_match == WORK_TYPE_SCORES["same"]:
            parts.append("Preferred work type matches the role.")
        if breakdown.salary_match == SALARY_SCORES["fits"]:
            parts.append("Salary expectations fit within the offered range.")

        return " ".join(parts)

    def rank_matches(
        self,
        matches: list[tuple[JobPosting, MatchResult]],
    ) -> list[tuple[JobPosting, MatchResult]]:
        """
        Rank (job, match) pairs by score.

        Args:
            matches: Pairs of job posting and its match result

        Returns:
            Sorted list with highest scores first
        """
        return sorted(matches, key=lambda pair: pair[1].confidence_level, reverse=True)


# Singleton instance
_matching_engine: Optional[MatchingEngine] = None


def get_matching_engine() -> MatchingEngine:
    """Get the matching engine singleton instance."""
    global _matching_engine
    if _matching_engine is None:
        _matching_engine = MatchingEngine()
    return _matching_engine
