"""
Tests for jobmatch.core.matching.matching_engine: deterministic scoring.
"""

import pytest

from jobmatch.core.matching.matching_engine import MatchingEngine, get_matching_engine
from jobmatch.data.models import MatchResult, score_from_confidence
from jobmatch.utils.constants import MATCH_WEIGHTS, MatchScoreLevel, MatchSource


# ── _match_skills ────────────────────────────────────────────────────────────


class TestMatchSkills:
    def test_exact_match(self, matching_engine):
        matched, score = matching_engine._match_skills(["python", "django"], ["python", "django"])
        assert matched == ["python", "django"]
        assert score == 1.0

    def test_none_matched(self, matching_engine):
        matched, score = matching_engine._match_skills(["rust"], ["java", "spring"])
        assert matched == []
        assert score == 0.0

    def test_java_matches_javascript(self, matching_engine):
        matched, score = matching_engine._match_skills(["java"], ["javascript"])
        assert matched == ["java"]
        assert score == 1.0

    def test_javascript_matches_java(self, matching_engine):
        matched, _ = matching_engine._match_skills(["javascript"], ["java"])
        assert matched == ["javascript"]

    def test_react_does_not_match_node(self, matching_engine):
        matched, score = matching_engine._match_skills(["react"], ["node"])
        assert matched == []
        assert score == 0.0

    def test_case_insensitive(self, matching_engine):
        matched, score = matching_engine._match_skills(["Python"], ["PYTHON"])
        assert matched == ["python"]
        assert score == 1.0

    def test_no_job_skills_scores_zero(self, matching_engine):
        matched, score = matching_engine._match_skills(["python"], [])
        assert matched == []
        assert score == 0.0

    def test_score_clamped_to_one(self, matching_engine):
        # Both candidate skills hit the single job skill
        matched, score = matching_engine._match_skills(["java", "javascript"], ["javascript"])
        assert len(matched) == 2
        assert score == 1.0

    def test_duplicates_collapse(self, matching_engine):
        matched, score = matching_engine._match_skills(
            ["python", "Python ", "PYTHON"], ["python", "sql"]
        )
        assert matched == ["python"]
        assert score == 0.5

    def test_blank_skills_ignored(self, matching_engine):
        matched, score = matching_engine._match_skills(["", "  "], ["python"])
        assert matched == []
        assert score == 0.0

    def test_order_of_first_appearance(self, matching_engine):
        matched, _ = matching_engine._match_skills(["sql", "python", "aws"], ["aws", "python", "sql"])
        assert matched == ["sql", "python", "aws"]


# ── _match_location ──────────────────────────────────────────────────────────


class TestMatchLocation:
    def test_containment_is_full_match(self, matching_engine):
        assert matching_engine._match_location("San Francisco, CA", "San Francisco") == 1.0

    def test_exact_match(self, matching_engine):
        assert matching_engine._match_location("Berlin", "berlin") == 1.0

    def test_different_locations(self, matching_engine):
        assert matching_engine._match_location("Boston", "Denver") == 0.5

    def test_job_location_not_inside_candidate(self, matching_engine):
        # Containment is one-directional
        assert matching_engine._match_location("San Francisco", "San Francisco, CA") == 0.5

    @pytest.mark.parametrize("candidate,job", [(None, "Denver"), ("Boston", None), (None, None)])
    def test_unknown(self, matching_engine, candidate, job):
        assert matching_engine._match_location(candidate, job) == 0.7

    def test_blank_treated_as_unknown(self, matching_engine):
        assert matching_engine._match_location("   ", "Denver") == 0.7


# ── _match_work_type ─────────────────────────────────────────────────────────


class TestMatchWorkType:
    def test_same(self, matching_engine):
        assert matching_engine._match_work_type("Remote", "remote") == 1.0

    def test_different(self, matching_engine):
        assert matching_engine._match_work_type("remote", "onsite") == 0.6

    def test_unknown(self, matching_engine):
        assert matching_engine._match_work_type(None, "hybrid") == 0.8
        assert matching_engine._match_work_type("hybrid", None) == 0.8


# ── _match_salary ────────────────────────────────────────────────────────────


class TestMatchSalary:
    def test_within_range(self, matching_engine):
        assert matching_engine._match_salary(90000, 120000) == 1.0

    def test_equal_to_max(self, matching_engine):
        assert matching_engine._match_salary(120000, 120000) == 1.0

    def test_above_range(self, matching_engine):
        assert matching_engine._match_salary(150000, 120000) == 0.3

    def test_zero_is_a_value(self, matching_engine):
        assert matching_engine._match_salary(0, 50000) == 1.0

    def test_unknown(self, matching_engine):
        assert matching_engine._match_salary(None, 120000) == 0.8
        assert matching_engine._match_salary(90000, None) == 0.8


# ── score() ──────────────────────────────────────────────────────────────────


class TestScore:
    def test_partial_overlap_with_absent_fields(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["javascript", "react"])
        job = make_job(skills=["javascript", "node"])

        result = matching_engine.score(candidate, job)

        assert result.skill_matches == ["javascript"]
        assert result.breakdown.skill_match == 0.5
        assert result.breakdown.location_match == 0.7
        assert result.breakdown.work_type_match == 0.8
        assert result.breakdown.salary_match == 0.8
        assert result.confidence_level == pytest.approx(0.63)
        assert result.score == 63

    def test_perfect_match(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(
            skills=["python", "django"],
            location="Austin, TX",
            work_type="remote",
            salary_min=100000,
        )
        job = make_job(
            skills=["python", "django"],
            location="Austin",
            work_type="Remote",
            salary_max=140000,
        )

        result = matching_engine.score(candidate, job)

        assert result.confidence_level == 1.0
        assert result.score == 100
        assert result.score_level == MatchScoreLevel.EXCELLENT

    def test_worst_case(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(
            skills=["cobol"], location="Lima", work_type="onsite", salary_min=300000
        )
        job = make_job(skills=["go"], location="Oslo", work_type="remote", salary_max=100000)

        result = matching_engine.score(candidate, job)

        # 0*0.5 + 0.5*0.2 + 0.6*0.2 + 0.3*0.1
        assert result.confidence_level == pytest.approx(0.25)
        assert result.score == 25
        assert result.skill_matches == []

    def test_score_consistent_with_confidence(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["python", "aws", "sql"], location="Paris")
        job = make_job(skills=["python", "sql", "docker"], location="Lyon", work_type="hybrid")

        result = matching_engine.score(candidate, job)

        assert 0.0 <= result.confidence_level <= 1.0
        assert 0 <= result.score <= 100
        assert result.score == score_from_confidence(result.confidence_level)

    def test_source_is_algorithmic(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job())
        assert isinstance(result, MatchResult)
        assert result.source == MatchSource.ALGORITHMIC

    def test_deterministic(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["react", "typescript"], location="NYC")
        job = make_job(skills=["react"], location="NYC")
        assert matching_engine.score(candidate, job) == matching_engine.score(candidate, job)

    def test_empty_profiles_do_not_raise(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(skills=[], experience=""), make_job(skills=[]))
        # 0*0.5 + 0.7*0.2 + 0.8*0.2 + 0.8*0.1
        assert result.confidence_level == pytest.approx(0.38)
        assert result.score == 38

    def test_custom_weights(self, make_candidate, make_job):
        engine = MatchingEngine(weights={"skills": 1.0, "location": 0.0, "work_type": 0.0, "salary": 0.0})
        result = engine.score(make_candidate(skills=["python"]), make_job(skills=["python", "go"]))
        assert result.confidence_level == 0.5
        assert result.score == 50


# ── _generate_explanation ────────────────────────────────────────────────────


class TestExplanation:
    def test_mentions_matched_skills(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(
            make_candidate(skills=["javascript", "react"]),
            make_job(skills=["javascript", "node"]),
        )
        assert "50%" in result.explanation
        assert "javascript" in result.explanation
        assert result.explanation.startswith("Fair match for Backend Engineer at Acme.")

    def test_no_overlap_message(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(skills=["rust"]), make_job(skills=["java"]))
        assert "no overlapping skills" in result.explanation

    def test_perfect_factor_clauses(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(
            make_candidate(location="Denver, CO", work_type="remote", salary_min=10),
            make_job(location="Denver", work_type="remote", salary_max=20),
        )
        assert "Location is a perfect match." in result.explanation
        assert "Preferred work type matches the role." in result.explanation
        assert "Salary expectations fit within the offered range." in result.explanation

    def test_no_clauses_for_unknown_factors(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job())
        assert "Location" not in result.explanation
        assert "work type" not in result.explanation
        assert "Salary" not in result.explanation

    def test_untitled_job(self, matching_engine, make_candidate, make_job):
        result = matching_engine.score(make_candidate(), make_job(title="", company=""))
        assert "this position" in result.explanation


# ── rank_matches / singleton ─────────────────────────────────────────────────


class TestRankMatches:
    def test_highest_first(self, matching_engine, make_candidate, make_job):
        candidate = make_candidate(skills=["python"])
        jobs = [
            make_job(id=1, skills=["go"]),
            make_job(id=2, skills=["python"]),
            make_job(id=3, skills=["python", "go"]),
        ]
        ranked = matching_engine.rank_matches([(job, matching_engine.score(candidate, job)) for job in jobs])
        assert [job.id for job, _ in ranked] == [2, 3, 1]


def test_engine_weights_are_a_private_copy():
    engine = MatchingEngine()
    engine.weights["skills"] = 0.0
    assert MATCH_WEIGHTS["skills"] == 0.5
    assert MatchingEngine().weights["skills"] == 0.5


def test_get_matching_engine_returns_singleton():
    assert get_matching_engine() is get_matching_engine()
