"""Configuration models and YAML loader for the recommendation engine."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_SENIORITY_KEYWORDS: dict[str, list[str]] = {
    "staff_plus": ["staff", "principal", "distinguished", "architect", "director", "head", "vp"],
    "senior": ["senior", "sr", "lead"],
    "mid": ["mid", "intermediate"],
    "entry": ["junior", "jr", "entry", "graduate", "intern", "trainee", "associate"],
}


class ScoringConfig(BaseModel):
    """Point budgets and rule parameters for the match score dimensions."""

    skills_points: float = Field(default=40.0, ge=0.0)
    location_points: float = Field(default=25.0, ge=0.0)
    compensation_points: float = Field(default=20.0, ge=0.0)
    seniority_points: float = Field(default=15.0, ge=0.0)
    employer_size_points: float = Field(default=10.0, ge=0.0)
    compensation_tolerance: float = Field(default=0.30, gt=0.0, le=1.0)
    # Bands missing from YAML keep their defaults; checked most senior first.
    seniority_keywords: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_SENIORITY_KEYWORDS.items()},
    )

    @field_validator("seniority_keywords")
    @classmethod
    def known_bands(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        unknown = set(v) - set(DEFAULT_SENIORITY_KEYWORDS)
        if unknown:
            msg = f"unknown seniority bands: {sorted(unknown)}"
            raise ValueError(msg)
        merged = {band: v.get(band, kws) for band, kws in DEFAULT_SENIORITY_KEYWORDS.items()}
        return {band: [kw.lower().strip() for kw in kws if kw.strip()] for band, kws in merged.items()}


class RankingConfig(BaseModel):
    """Filtering, truncation and worker pool settings for one ranking run."""

    min_score_threshold: float = Field(default=20.0, ge=0.0, le=100.0)
    limit: int = Field(default=20, ge=1)
    max_workers: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)


class ServiceConfig(BaseModel):
    """Recommendation service settings (candidate fetch and result cache)."""

    candidate_limit: int = Field(default=50, ge=1)
    active_only: bool = True
    require_preferences: bool = False
    cache_ttl_seconds: float = Field(default=0.0, ge=0.0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
