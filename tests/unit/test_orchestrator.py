"""
Tests for jobmatch.core.matching.orchestrator: generative path and fallback.

The generative matcher is always a mock; no test reaches the network.
"""

from unittest.mock import AsyncMock, patch

import pytest

from jobmatch.core.matching import MatchOrchestrator
from jobmatch.utils.config import AppSettings
from jobmatch.utils.constants import DEFAULT_CAREER_INSIGHTS, MatchSource
from jobmatch.utils.exceptions import NetworkError, RequestTimeoutError


@pytest.fixture
def candidate(make_candidate):
    return make_candidate(skills=["javascript", "react"])


@pytest.fixture
def job(make_job):
    return make_job(skills=["javascript", "node"])


def _generative(payload=None, error=None):
    service = AsyncMock()
    if error is not None:
        service.generate_match.side_effect = error
    else:
        service.generate_match.return_value = payload
    return service


# ── no configuration ─────────────────────────────────────────────────────────


class TestUnconfigured:
    @pytest.mark.asyncio
    async def test_returns_algorithmic_result(self, matching_engine, candidate, job):
        orchestrator = MatchOrchestrator(engine=matching_engine)

        result = await orchestrator.generate_match(candidate, job)

        assert result == matching_engine.score(candidate, job)
        assert result.source == MatchSource.ALGORITHMIC
        assert result.score == 63

    @pytest.mark.asyncio
    async def test_from_settings_makes_no_network_calls(self, candidate, job):
        settings = AppSettings(_env_file=None)
        assert not settings.generative.is_configured

        with patch("jobmatch.services.openai_matcher.AsyncOpenAI") as client_cls:
            orchestrator = MatchOrchestrator.from_settings(settings)
            result = await orchestrator.generate_match(candidate, job)

        client_cls.assert_not_called()
        assert orchestrator.has_generative is False
        assert result.source == MatchSource.ALGORITHMIC

    @pytest.mark.asyncio
    async def test_insights_default(self, make_candidate):
        orchestrator = MatchOrchestrator()
        insights = await orchestrator.generate_insights(make_candidate())
        assert insights == list(DEFAULT_CAREER_INSIGHTS)


# ── generative success ───────────────────────────────────────────────────────


class TestGenerativeMatch:
    @pytest.mark.asyncio
    async def test_uses_payload(self, candidate, job):
        generative = _generative({
            "confidenceLevel": 0.82,
            "skillMatches": ["javascript"],
            "explanation": "Strong frontend background.",
            "score": 82,
        })
        orchestrator = MatchOrchestrator(generative=generative)

        result = await orchestrator.generate_match(candidate, job)

        generative.generate_match.assert_awaited_once_with(candidate, job)
        assert result.source == MatchSource.GENERATIVE
        assert result.confidence_level == 0.82
        assert result.score == 82
        assert result.skill_matches == ["javascript"]
        assert result.explanation == "Strong frontend background."
        assert result.breakdown is None

    @pytest.mark.asyncio
    async def test_out_of_range_values_clamped(self, candidate, job):
        orchestrator = MatchOrchestrator(
            generative=_generative({"confidenceLevel": 1.7, "score": 140, "skillMatches": []})
        )
        result = await orchestrator.generate_match(candidate, job)
        assert result.confidence_level == 1.0
        assert result.score == 100

    @pytest.mark.asyncio
    async def test_negative_values_clamped(self, candidate, job):
        orchestrator = MatchOrchestrator(
            generative=_generative({"confidenceLevel": -0.2, "score": -5})
        )
        result = await orchestrator.generate_match(candidate, job)
        assert result.confidence_level == 0.0
        assert result.score == 0

    @pytest.mark.asyncio
    async def test_missing_fields_default(self, candidate, job):
        orchestrator = MatchOrchestrator(generative=_generative({}))
        result = await orchestrator.generate_match(candidate, job)
        assert result.source == MatchSource.GENERATIVE
        assert result.skill_matches == []
        assert result.explanation == ""
        assert result.score == 0
        assert result.confidence_level == 0.0

    @pytest.mark.asyncio
    async def test_ai_explanation_alias(self, candidate, job):
        orchestrator = MatchOrchestrator(
            generative=_generative({"aiExplanation": "Good fit.", "score": 70, "confidenceLevel": 0.7})
        )
        result = await orchestrator.generate_match(candidate, job)
        assert result.explanation == "Good fit."


# ── fallback ─────────────────────────────────────────────────────────────────


class TestFallback:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        NetworkError("boom", service="openai", status=500),
        RequestTimeoutError("slow", timeout=30),
        ValueError("unexpected"),
    ])
    async def test_errors_fall_back(self, matching_engine, candidate, job, error):
        orchestrator = MatchOrchestrator(generative=_generative(error=error), engine=matching_engine)

        result = await orchestrator.generate_match(candidate, job)

        assert result == matching_engine.score(candidate, job)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        ["not", "an", "object"],
        "plain text",
        None,
        {"confidenceLevel": "high"},
        {"score": True},
        {"skillMatches": "javascript"},
        {"explanation": 42},
    ])
    async def test_invalid_payload_falls_back(self, matching_engine, candidate, job, payload):
        orchestrator = MatchOrchestrator(generative=_generative(payload), engine=matching_engine)

        result = await orchestrator.generate_match(candidate, job)

        assert result.source == MatchSource.ALGORITHMIC
        assert result.score == 63


# ── insights ─────────────────────────────────────────────────────────────────


class TestInsights:
    @pytest.mark.asyncio
    async def test_uses_generated_insights(self, make_candidate):
        generative = AsyncMock()
        generative.generate_insights.return_value = ["Learn Kubernetes."]
        orchestrator = MatchOrchestrator(generative=generative)

        assert await orchestrator.generate_insights(make_candidate()) == ["Learn Kubernetes."]

    @pytest.mark.asyncio
    async def test_failure_returns_defaults(self, make_candidate):
        generative = AsyncMock()
        generative.generate_insights.side_effect = NetworkError("down")
        orchestrator = MatchOrchestrator(generative=generative)

        assert await orchestrator.generate_insights(make_candidate()) == list(DEFAULT_CAREER_INSIGHTS)

    @pytest.mark.asyncio
    async def test_empty_returns_defaults(self, make_candidate):
        generative = AsyncMock()
        generative.generate_insights.return_value = []
        orchestrator = MatchOrchestrator(generative=generative)

        assert await orchestrator.generate_insights(make_candidate()) == list(DEFAULT_CAREER_INSIGHTS)
