"""
Match orchestration.

Produces a MatchResult for a candidate/job pair, preferring a generative
assessment when a generative matcher is configured and falling back to
the deterministic MatchingEngine whenever it is not, or when it fails.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from jobmatch.data.models import CandidateProfile, JobPosting, MatchResult
from jobmatch.utils.config import AppSettings, get_settings
from jobmatch.utils.constants import DEFAULT_CAREER_INSIGHTS
from jobmatch.utils.logger import audit_log, get_logger

from .matching_engine import MatchingEngine, get_matching_engine

logger = get_logger(__name__)


@runtime_checkable
class GenerativeMatcher(Protocol):
    """A service that assesses matches and career insights with a generative model."""

    async def generate_match(self, candidate: CandidateProfile, job: JobPosting) -> Any:
        ...

    async def generate_insights(self, candidate: CandidateProfile) -> list[str]:
        ...


class MatchOrchestrator:
    """
    Chooses between generative and algorithmic matching.

    generate_match never raises for valid inputs: a missing configuration,
    a failed call or an unusable payload all yield the algorithmic result.

    Usage:
        orchestrator = MatchOrchestrator.from_settings()
        result = await orchestrator.generate_match(candidate, job)
    """

    def __init__(
        self,
        generative: Optional[GenerativeMatcher] = None,
        engine: Optional[MatchingEngine] = None,
    ):
        self.generative = generative
        self.engine = engine or get_matching_engine()

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "MatchOrchestrator":
        """
        Build an orchestrator from configuration.

        The OpenAI client is only created when OPENAI_API_KEY is set, so an
        unconfigured orchestrator never touches the network.
        """
        settings = settings or get_settings()
        generative = None
        if settings.generative.is_configured:
            from jobmatch.services.openai_matcher import OpenAIMatchService

            generative = OpenAIMatchService(settings.generative)
        else:
            logger.info("No generative service configured; using algorithmic matching only")
        return cls(generative=generative)

    @property
    def has_generative(self) -> bool:
        return self.generative is not None

    async def generate_match(self, candidate: CandidateProfile, job: JobPosting) -> MatchResult:
        """
        Match a candidate against a job posting.

        Args:
            candidate: Candidate profile
            job: Job posting

        Returns:
            Generative MatchResult, or the algorithmic one on fallback
        """
        if self.generative is None:
            return self.engine.score(candidate, job)

        try:
            payload = await self.generative.generate_match(candidate, job)
            result = MatchResult.from_generative(payload)
        except Exception as e:
            logger.warning(f"Generative match failed for {job.display_title}, using algorithmic score: {e}")
            audit_log(
                "match_fallback",
                {"job_id": job.id, "error_type": type(e).__name__, "error": str(e)},
            )
            return self.engine.score(candidate, job)

        audit_log(
            "match_generated",
            {"job_id": job.id, "score": result.score, "source": result.source.value},
        )
        return result

    async def generate_insights(self, candidate: CandidateProfile) -> list[str]:
        """
        Career insights for a candidate.

        Returns the default insights when no generative service is
        configured, the call fails, or it yields nothing.
        """
        if self.generative is None:
            return list(DEFAULT_CAREER_INSIGHTS)

        try:
            insights = await self.generative.generate_insights(candidate)
        except Exception as e:
            logger.warning(f"Insight generation failed, using defaults: {e}")
            return list(DEFAULT_CAREER_INSIGHTS)

        return insights or list(DEFAULT_CAREER_INSIGHTS)
