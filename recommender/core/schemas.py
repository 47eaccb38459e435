"""Core data models for the recommendation engine.

All models are frozen: the core only reads postings and profiles, and
scores are produced as new MatchScore objects.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SeniorityBand(str, Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    STAFF_PLUS = "staff_plus"

    @property
    def rank(self) -> int:
        return list(SeniorityBand).index(self)


class EmployerSize(str, Enum):
    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class EmploymentType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class Dimension(str, Enum):
    """Match dimensions, in declaration order (used for tie-breaking reasons)."""

    SKILLS = "skills"
    LOCATION = "location"
    COMPENSATION = "compensation"
    SENIORITY = "seniority"
    EMPLOYER_SIZE = "employer_size"


def _normalize_enum_text(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip().lower()
        if not v:
            return None
        if v == "staff+":
            return SeniorityBand.STAFF_PLUS.value
    return v


def _clean_skills(skills: list[str]) -> list[str]:
    """Strip blanks and drop case-insensitive duplicates, keeping first spelling."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for s in skills:
        s = " ".join(s.split())
        key = s.casefold()
        if s and key not in seen:
            seen.add(key)
            cleaned.append(s)
    return cleaned


def _check_salary_range(low: float | None, high: float | None) -> None:
    if low is not None and high is not None and low > high:
        msg = f"salary_min ({low:g}) must not exceed salary_max ({high:g})"
        raise ValueError(msg)


class JobPosting(BaseModel):
    """An open job listing supplied by the data-access layer.

    posting_id and title default to empty so that a malformed record can
    still be handed to the ranking pipeline and reported as a skip.
    """

    model_config = ConfigDict(frozen=True)

    posting_id: str = ""
    title: str = ""
    location: str = ""
    salary_min: float | None = Field(default=None, ge=0.0)
    salary_max: float | None = Field(default=None, ge=0.0)
    skills: list[str] = Field(default_factory=list)
    employment_type: EmploymentType | None = None
    employer_id: str = ""
    employer_size: EmployerSize | None = None
    seniority: SeniorityBand | None = None
    remote: bool = False
    is_active: bool = True
    posted_at: datetime | None = None

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        return _clean_skills(v)

    @field_validator("employer_size", "seniority", mode="before")
    @classmethod
    def normalize_enums(cls, v: Any) -> Any:
        return _normalize_enum_text(v)

    @field_validator("employment_type", mode="before")
    @classmethod
    def normalize_employment_type(cls, v: Any) -> Any:
        v = _normalize_enum_text(v)
        return v.replace("_", "-") if isinstance(v, str) else v

    @field_validator("posted_at")
    @classmethod
    def posted_at_utc(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def salary_range_ordered(self) -> "JobPosting":
        _check_salary_range(self.salary_min, self.salary_max)
        return self

    @property
    def is_remote(self) -> bool:
        return self.remote or "remote" in self.location.casefold()


class PreferenceProfile(BaseModel):
    """What a job seeker is looking for. Every preference is optional."""

    model_config = ConfigDict(frozen=True)

    subject_id: str = ""
    skills: list[str] = Field(default_factory=list)
    preferred_location: str = ""
    salary_min: float | None = Field(default=None, ge=0.0)
    salary_max: float | None = Field(default=None, ge=0.0)
    seniority: SeniorityBand | None = None
    employer_size: EmployerSize | None = None
    remote_preference: bool | None = None

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: list[str]) -> list[str]:
        return _clean_skills(v)

    @field_validator("preferred_location")
    @classmethod
    def strip_location(cls, v: str) -> str:
        return " ".join(v.split())

    @field_validator("employer_size", "seniority", mode="before")
    @classmethod
    def normalize_enums(cls, v: Any) -> Any:
        return _normalize_enum_text(v)

    @model_validator(mode="after")
    def salary_range_ordered(self) -> "PreferenceProfile":
        _check_salary_range(self.salary_min, self.salary_max)
        return self

    def has_preferences(self) -> bool:
        """Return True if at least one preference field is populated."""
        return bool(
            self.skills
            or self.preferred_location
            or self.salary_min is not None
            or self.salary_max is not None
            or self.seniority is not None
            or self.employer_size is not None
            or self.remote_preference is not None
        )


class Contribution(BaseModel):
    """Points one dimension added to a match score, with its explanation."""

    model_config = ConfigDict(frozen=True)

    dimension: Dimension
    points: float = Field(default=0.0, ge=0.0)
    reason: str = ""


class MatchScore(BaseModel):
    """A scored posting. Contributions hold only non-zero dimensions, highest first."""

    model_config = ConfigDict(frozen=True)

    posting: JobPosting
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    contributions: list[Contribution] = Field(default_factory=list)

    @property
    def posting_id(self) -> str:
        return self.posting.posting_id

    @property
    def reasons(self) -> list[str]:
        return [c.reason for c in self.contributions]

    @property
    def label(self) -> str:
        if self.score >= 80:
            return "Excellent Match"
        if self.score >= 60:
            return "Good Match"
        if self.score >= 40:
            return "Fair Match"
        return "Potential Match"


class StructuralSkip(BaseModel):
    """A posting that could not be scored because it is structurally invalid."""

    model_config = ConfigDict(frozen=True)

    posting_id: str = ""
    reason: str


class RecommendationResult(BaseModel):
    """Outcome of one ranking run."""

    model_config = ConfigDict(frozen=True)

    results: list[MatchScore] = Field(default_factory=list)
    skipped_count: int = Field(default=0, ge=0)
    scored_count: int = Field(default=0, ge=0)
    partial: bool = False
