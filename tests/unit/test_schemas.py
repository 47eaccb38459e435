"""Tests for core schemas: JobPosting, PreferenceProfile, MatchScore."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from recommender.core.schemas import (
    Contribution,
    Dimension,
    EmployerSize,
    EmploymentType,
    JobPosting,
    MatchScore,
    PreferenceProfile,
    RecommendationResult,
    SeniorityBand,
    StructuralSkip,
)


def _make_posting(**overrides: object) -> JobPosting:
    defaults: dict[str, object] = {
        "posting_id": "job-1",
        "title": "Senior Frontend Engineer",
        "location": "San Francisco, CA",
        "skills": ["React", "TypeScript"],
        "employer_id": "acme",
    }
    defaults.update(overrides)
    return JobPosting(**defaults)  # type: ignore[arg-type]


class TestJobPosting:
    def test_create_with_no_fields(self) -> None:
        p = JobPosting()
        assert p.posting_id == ""
        assert p.title == ""
        assert p.skills == []
        assert p.is_active is True
        assert p.remote is False

    def test_frozen_model(self) -> None:
        p = _make_posting()
        with pytest.raises(ValidationError):
            p.title = "New Title"  # type: ignore[misc]

    def test_skills_deduplicated_case_insensitive(self) -> None:
        p = _make_posting(skills=["React", " react ", "TypeScript", "", "Node.js"])
        assert p.skills == ["React", "TypeScript", "Node.js"]

    def test_salary_range_ordered(self) -> None:
        with pytest.raises(ValidationError, match="must not exceed"):
            _make_posting(salary_min=150000, salary_max=100000)

    def test_one_salary_bound_ok(self) -> None:
        p = _make_posting(salary_min=100000)
        assert p.salary_max is None

    def test_negative_salary_raises(self) -> None:
        with pytest.raises(ValidationError):
            _make_posting(salary_min=-1)

    def test_naive_posted_at_becomes_utc(self) -> None:
        p = _make_posting(posted_at=datetime(2024, 1, 10, 12, 0))
        assert p.posted_at == datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)

    def test_aware_posted_at_converted_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        p = _make_posting(posted_at=datetime(2024, 1, 10, 14, 0, tzinfo=plus_two))
        assert p.posted_at == datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
        assert p.posted_at.tzinfo == timezone.utc  # type: ignore[union-attr]

    def test_posted_at_from_string(self) -> None:
        p = _make_posting(posted_at="2024-01-12T09:00:00Z")
        assert p.posted_at == datetime(2024, 1, 12, 9, 0, tzinfo=timezone.utc)

    def test_enum_normalization(self) -> None:
        p = _make_posting(
            employment_type="FULL_TIME",
            employer_size=" Medium ",
            seniority="Staff+",
        )
        assert p.employment_type is EmploymentType.FULL_TIME
        assert p.employer_size is EmployerSize.MEDIUM
        assert p.seniority is SeniorityBand.STAFF_PLUS

    def test_blank_enum_is_none(self) -> None:
        p = _make_posting(employer_size="", seniority="  ")
        assert p.employer_size is None
        assert p.seniority is None

    def test_unknown_enum_raises(self) -> None:
        with pytest.raises(ValidationError):
            _make_posting(employer_size="gigantic")

    def test_is_remote_from_flag(self) -> None:
        assert _make_posting(remote=True, location="Berlin").is_remote is True

    def test_is_remote_from_location(self) -> None:
        assert _make_posting(location="Remote (US)").is_remote is True

    def test_not_remote(self) -> None:
        assert _make_posting(location="Berlin").is_remote is False


class TestPreferenceProfile:
    def test_empty_profile_valid(self) -> None:
        p = PreferenceProfile(subject_id="u1")
        assert p.has_preferences() is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("skills", ["Python"]),
            ("preferred_location", "Berlin"),
            ("salary_min", 50000),
            ("salary_max", 90000),
            ("seniority", "senior"),
            ("employer_size", "startup"),
            ("remote_preference", False),
        ],
    )
    def test_has_preferences(self, field: str, value: object) -> None:
        p = PreferenceProfile(subject_id="u1", **{field: value})  # type: ignore[arg-type]
        assert p.has_preferences() is True

    def test_blank_location_is_not_a_preference(self) -> None:
        p = PreferenceProfile(subject_id="u1", preferred_location="   ")
        assert p.preferred_location == ""
        assert p.has_preferences() is False

    def test_salary_range_ordered(self) -> None:
        with pytest.raises(ValidationError):
            PreferenceProfile(subject_id="u1", salary_min=200000, salary_max=100000)

    def test_seniority_rank_order(self) -> None:
        ranks = [b.rank for b in SeniorityBand]
        assert ranks == [0, 1, 2, 3]


class TestMatchScore:
    @pytest.mark.parametrize(
        "score,label",
        [
            (95.0, "Excellent Match"),
            (80.0, "Excellent Match"),
            (60.0, "Good Match"),
            (45.5, "Fair Match"),
            (39.9, "Potential Match"),
        ],
    )
    def test_label(self, score: float, label: str) -> None:
        m = MatchScore(posting=_make_posting(), score=score)
        assert m.label == label

    def test_score_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MatchScore(posting=_make_posting(), score=100.5)
        with pytest.raises(ValidationError):
            MatchScore(posting=_make_posting(), score=-0.1)

    def test_posting_id_and_reasons(self) -> None:
        m = MatchScore(
            posting=_make_posting(posting_id="job-9"),
            score=35.0,
            contributions=[
                Contribution(dimension=Dimension.LOCATION, points=25.0, reason="here"),
                Contribution(dimension=Dimension.EMPLOYER_SIZE, points=10.0, reason="size"),
            ],
        )
        assert m.posting_id == "job-9"
        assert m.reasons == ["here", "size"]


class TestResultModels:
    def test_recommendation_result_defaults(self) -> None:
        r = RecommendationResult()
        assert r.results == []
        assert r.skipped_count == 0
        assert r.partial is False

    def test_structural_skip(self) -> None:
        s = StructuralSkip(reason="posting has no identifier")
        assert s.posting_id == ""
