"""Rule-based match scoring for job postings.

Score range: 0-100. Each dimension's budget comes from ScoringConfig;
the default budgets total 110, so a posting matching on every dimension
is clamped to 100.
Contributions are kept for explanation, highest first.
"""

import logging

from recommender.core.config import ScoringConfig
from recommender.core.errors import InvalidPostingError
from recommender.core.schemas import (
    JobPosting,
    MatchScore,
    PreferenceProfile,
    StructuralSkip,
)
from recommender.pipeline.features import extract_features

logger = logging.getLogger(__name__)


def score_posting(
    posting: JobPosting,
    profile: PreferenceProfile,
    config: ScoringConfig,
) -> MatchScore | StructuralSkip:
    """Score a single posting against a profile.

    Pure: reads its inputs only, so it is safe to call from several
    workers at once with the same profile.

    Returns:
        MatchScore with a score 0-100, or StructuralSkip when the posting
        is missing its identifier or title.
    """
    try:
        contributions = extract_features(posting, profile, config)
    except InvalidPostingError as e:
        logger.debug("Skipping posting '%s': %s", posting.posting_id, e)
        return StructuralSkip(posting_id=posting.posting_id, reason=str(e))

    score = sum(c.points for c in contributions)

    # Clamp to 0-100
    score = max(0.0, min(100.0, score))

    # Stable sort keeps declaration order for equal points.
    non_zero = [c for c in contributions if c.points > 0]
    non_zero.sort(key=lambda c: c.points, reverse=True)

    return MatchScore(posting=posting, score=score, contributions=non_zero)

