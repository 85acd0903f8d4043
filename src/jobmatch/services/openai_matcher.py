"""
Generative matching client backed by the OpenAI chat completions API.

Asks the model for a structured match assessment (or career insights)
and returns the decoded JSON object. Callers validate the payload; this
module only turns transport and decoding problems into JobMatch errors.
"""

import json
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from jobmatch.data.models import CandidateProfile, JobPosting
from jobmatch.utils.config import GenerativeSettings, get_settings
from jobmatch.utils.exceptions import (
    MalformedResponseError,
    NetworkError,
    ProviderUnavailableError,
    RequestTimeoutError,
)
from jobmatch.utils.logger import get_logger

logger = get_logger(__name__)

MATCH_SYSTEM_PROMPT = (
    "You are an expert AI recruiter that analyzes job matches. "
    "Always respond with valid JSON only."
)

INSIGHTS_SYSTEM_PROMPT = (
    "You are a career advisor providing actionable insights. "
    "Keep insights concise and specific."
)


def _or_unspecified(value: Any) -> str:
    return str(value) if value not in (None, "") else "Not specified"


def build_match_prompt(candidate: CandidateProfile, job: JobPosting) -> str:
    """Prompt asking for a JSON match assessment of one candidate/job pair."""
    return f"""
As an AI hiring expert, analyze the match between this candidate and job posting.

Candidate Profile:
- Skills: {', '.join(candidate.skills)}
- Experience: {candidate.experience}
- Industry: {_or_unspecified(candidate.industry)}
- Work Type: {_or_unspecified(candidate.work_type)}
- Salary Range: ${candidate.salary_min or 0} - ${_or_unspecified(candidate.salary_max)}
- Location: {_or_unspecified(candidate.location)}

Job Posting:
- Title: {job.title}
- Company: {job.company}
- Required Skills: {', '.join(job.skills)}
- Requirements: {', '.join(job.requirements)}
- Industry: {_or_unspecified(job.industry)}
- Work Type: {_or_unspecified(job.work_type)}
- Salary Range: ${job.salary_min or 0} - ${_or_unspecified(job.salary_max)}
- Location: {_or_unspecified(job.location)}
- Description: {job.description}

Provide a detailed analysis in JSON format with:
{{
  "confidenceLevel": number between 0-1,
  "skillMatches": array of matching skills,
  "explanation": string explaining why this is a good match,
  "score": number between 0-100
}}
""".strip()


def build_insights_prompt(candidate: CandidateProfile) -> str:
    """Prompt asking for two or three career insights as JSON."""
    return f"""
Generate 2-3 actionable career insights for this candidate profile:

Skills: {', '.join(candidate.skills)}
Experience: {candidate.experience}
Industry: {_or_unspecified(candidate.industry)}
Location: {_or_unspecified(candidate.location)}

Provide insights as a JSON array of strings focusing on:
- Skill development opportunities
- Market trends relevant to their profile
- Ways to improve their job matching potential

Format: {{"insights": ["insight1", "insight2", "insight3"]}}
""".strip()


class OpenAIMatchService:
    """
    Generative matcher using OpenAI chat completions in JSON mode.

    Usage:
        service = OpenAIMatchService()
        payload = await service.generate_match(candidate, job)
    """

    def __init__(
        self,
        settings: Optional[GenerativeSettings] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Generative settings. Defaults to the global settings.
            client: Preconfigured client, mainly for tests.

        Raises:
            ProviderUnavailableError: If no API key is configured and no
                client is given.
        """
        self.settings = settings or get_settings().generative
        if client is None:
            if not self.settings.is_configured:
                raise ProviderUnavailableError("OPENAI_API_KEY is not set", provider="openai")
            client = AsyncOpenAI(api_key=self.settings.api_key, timeout=self.settings.timeout)
        self._client = client
        self.model = self.settings.model

    async def _complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
    ) -> dict[str, Any]:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=temperature,
            )
        except openai.APITimeoutError as e:
            raise RequestTimeoutError(
                "OpenAI request timed out",
                timeout=self.settings.timeout,
                service="openai",
                cause=e,
            ) from e
        except openai.APIStatusError as e:
            raise NetworkError(
                f"OpenAI request failed: {e.message}",
                service="openai",
                status=e.status_code,
                cause=e,
            ) from e
        except openai.APIError as e:
            raise NetworkError(f"OpenAI request failed: {e}", service="openai", cause=e) from e

        if not response.choices:
            raise MalformedResponseError("OpenAI returned no choices", service="openai")

        content = response.choices[0].message.content or "{}"
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                "OpenAI returned invalid JSON", service="openai", cause=e
            ) from e

        if not isinstance(payload, dict):
            raise MalformedResponseError("OpenAI returned a non-object JSON value", service="openai")
        return payload

    async def generate_match(self, candidate: CandidateProfile, job: JobPosting) -> dict[str, Any]:
        """Ask the model for a match assessment; returns the raw JSON object."""
        logger.debug(f"Requesting generative match for {job.display_title} ({self.model})")
        return await self._complete_json(
            MATCH_SYSTEM_PROMPT,
            build_match_prompt(candidate, job),
            self.settings.temperature,
        )

    async def generate_insights(self, candidate: CandidateProfile) -> list[str]:
        """Ask the model for career insights for a candidate."""
        payload = await self._complete_json(
            INSIGHTS_SYSTEM_PROMPT,
            build_insights_prompt(candidate),
            self.settings.insights_temperature,
        )
        insights = payload.get("insights") or []
        if not isinstance(insights, list):
            raise MalformedResponseError("'insights' is not an array", service="openai")
        return [str(i) for i in insights if i]
