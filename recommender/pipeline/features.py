"""Per-dimension feature extraction for one (posting, profile) pair.

Each dimension has a point budget from ScoringConfig and is scored
independently. Missing optional data yields a zero contribution with no
reason; only a structurally invalid posting raises.

Dimensions (declaration order):
  1. skills        : overlap between profile and posting skills
  2. location      : preferred location containment, or remote match
  3. compensation  : salary midpoint distance within tolerance
  4. seniority     : band equality (full) or adjacency (half)
  5. employer_size : exact size band match
"""

import logging
import re
import unicodedata

from recommender.core.config import ScoringConfig
from recommender.core.errors import InvalidPostingError
from recommender.core.schemas import (
    Contribution,
    Dimension,
    JobPosting,
    PreferenceProfile,
    SeniorityBand,
)

logger = logging.getLogger(__name__)


def extract_features(
    posting: JobPosting,
    profile: PreferenceProfile,
    config: ScoringConfig,
) -> list[Contribution]:
    """Compute every dimension's contribution, in declaration order.

    Raises:
        InvalidPostingError: If the posting has no identifier or no title.
    """
    validate_posting(posting)
    return [
        skill_overlap(posting, profile, config.skills_points),
        location_fit(posting, profile, config.location_points),
        compensation_fit(
            posting, profile, config.compensation_points, config.compensation_tolerance,
        ),
        seniority_fit(posting, profile, config.seniority_points, config.seniority_keywords),
        employer_size_fit(posting, profile, config.employer_size_points),
    ]


def validate_posting(posting: JobPosting) -> None:
    if not posting.posting_id.strip():
        msg = "posting has no identifier"
        raise InvalidPostingError(msg)
    if not posting.title.strip():
        msg = f"posting '{posting.posting_id}' has no title"
        raise InvalidPostingError(msg)


def skill_overlap(
    posting: JobPosting,
    profile: PreferenceProfile,
    max_points: float,
) -> Contribution:
    """Score the share of skills in common.

    A profile skill matches when it and some posting skill contain each
    other (case-insensitive, either direction). The share is taken over the
    larger of the two skill lists.
    """
    if not posting.skills or not profile.skills:
        return Contribution(dimension=Dimension.SKILLS)

    posting_skills = [s.casefold() for s in posting.skills]
    matched = [
        skill for skill in profile.skills
        if any(_contains_either(skill.casefold(), ps) for ps in posting_skills)
    ]
    if not matched:
        return Contribution(dimension=Dimension.SKILLS)

    denominator = max(len(posting.skills), len(profile.skills))
    points = max_points * len(matched) / denominator
    reason = f"{len(matched)} of {denominator} skills match: {', '.join(matched)}"
    return Contribution(dimension=Dimension.SKILLS, points=points, reason=reason)


def location_fit(
    posting: JobPosting,
    profile: PreferenceProfile,
    max_points: float,
) -> Contribution:
    """Binary location match: preferred area containment, or remote on both sides."""
    preferred = _normalize_text(profile.preferred_location)
    if preferred and preferred in _normalize_text(posting.location):
        reason = f"Located in your preferred area: {posting.location}"
        return Contribution(dimension=Dimension.LOCATION, points=max_points, reason=reason)

    if profile.remote_preference and posting.is_remote:
        reason = "Remote position matches your preference"
        return Contribution(dimension=Dimension.LOCATION, points=max_points, reason=reason)

    return Contribution(dimension=Dimension.LOCATION)


def compensation_fit(
    posting: JobPosting,
    profile: PreferenceProfile,
    max_points: float,
    tolerance: float,
) -> Contribution:
    """Score how close the salary midpoints are, relative to the profile's midpoint."""
    bounds = (posting.salary_min, posting.salary_max, profile.salary_min, profile.salary_max)
    if any(b is None for b in bounds):
        return Contribution(dimension=Dimension.COMPENSATION)

    job_mid = (posting.salary_min + posting.salary_max) / 2  # type: ignore[operator]
    profile_mid = (profile.salary_min + profile.salary_max) / 2  # type: ignore[operator]
    if profile_mid <= 0:
        return Contribution(dimension=Dimension.COMPENSATION)

    diff = abs(job_mid - profile_mid) / profile_mid
    if diff >= tolerance:
        return Contribution(dimension=Dimension.COMPENSATION)

    reason = f"Salary range matches your expectations (within {diff:.0%} of your target)"
    return Contribution(
        dimension=Dimension.COMPENSATION,
        points=max_points * (1 - diff),
        reason=reason,
    )


def seniority_fit(
    posting: JobPosting,
    profile: PreferenceProfile,
    max_points: float,
    keywords: dict[str, list[str]],
) -> Contribution:
    """Full points for the same band, half for an adjacent band."""
    if profile.seniority is None:
        return Contribution(dimension=Dimension.SENIORITY)

    band = posting.seniority or infer_seniority(posting.title, keywords)
    if band is None:
        return Contribution(dimension=Dimension.SENIORITY)

    distance = abs(band.rank - profile.seniority.rank)
    if distance == 0:
        reason = f"Seniority level matches your background ({_band_name(band)})"
        return Contribution(dimension=Dimension.SENIORITY, points=max_points, reason=reason)
    if distance == 1:
        reason = (
            f"Seniority level is one step from yours "
            f"({_band_name(band)} vs {_band_name(profile.seniority)})"
        )
        return Contribution(dimension=Dimension.SENIORITY, points=max_points / 2, reason=reason)

    return Contribution(dimension=Dimension.SENIORITY)


def employer_size_fit(
    posting: JobPosting,
    profile: PreferenceProfile,
    max_points: float,
) -> Contribution:
    if profile.employer_size is None or posting.employer_size != profile.employer_size:
        return Contribution(dimension=Dimension.EMPLOYER_SIZE)
    reason = f"Employer size matches your preference ({profile.employer_size.value})"
    return Contribution(dimension=Dimension.EMPLOYER_SIZE, points=max_points, reason=reason)


def infer_seniority(title: str, keywords: dict[str, list[str]]) -> SeniorityBand | None:
    """Derive a seniority band from whole-word title keywords.

    Bands are tried in the mapping's order, so "Senior Staff Engineer"
    resolves to staff_plus with the default keywords.
    """
    title_lower = title.lower()
    for band, band_keywords in keywords.items():
        for kw in band_keywords:
            if re.search(rf"\b{re.escape(kw)}\b", title_lower):
                return SeniorityBand(band)
    return None


def _contains_either(a: str, b: str) -> bool:
    return a in b or b in a


def _normalize_text(text: str) -> str:
    return unicodedata.normalize("NFKC", text).casefold().strip()


def _band_name(band: SeniorityBand) -> str:
    return "staff+" if band is SeniorityBand.STAFF_PLUS else band.value
