"""Ranking pipeline: score a candidate set, filter, sort, truncate.

Stages of one run (no state survives between runs):
  1. Dispatching: candidates striped across a per-call worker pool
  2. Collecting : per-worker buffers merged, skips counted
  3. Filtering  : drop scores <= threshold
  4. Sorting    : score desc, then newest posting, then smallest id
  5. Truncated  : keep at most `limit` entries

Cancellation (deadline or event) stops workers from picking up further
postings; whatever was scored is returned with partial=True.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from enum import Enum

from recommender.core.config import RankingConfig, ScoringConfig
from recommender.core.errors import InvalidProfileError
from recommender.core.schemas import (
    JobPosting,
    MatchScore,
    PreferenceProfile,
    RecommendationResult,
)
from recommender.pipeline.scorer import score_posting

logger = logging.getLogger(__name__)

# Returns True once the run should stop picking up postings.
StopCheck = Callable[[], bool]


class PipelineStage(str, Enum):
    DISPATCHING = "dispatching"
    COLLECTING = "collecting"
    FILTERING = "filtering"
    SORTING = "sorting"
    TRUNCATED = "truncated"


class WorkerBatch:
    """Local buffer filled by one worker; merged once all workers finish."""

    def __init__(self) -> None:
        self.scored: list[MatchScore] = []
        self.skipped = 0
        self.unscored = 0


def rank_postings(
    profile: PreferenceProfile,
    candidates: Sequence[JobPosting],
    scoring: ScoringConfig | None = None,
    ranking: RankingConfig | None = None,
    *,
    min_score_threshold: float | None = None,
    limit: int | None = None,
    deadline: datetime | None = None,
    cancel_event: threading.Event | None = None,
    require_preferences: bool = False,
) -> RecommendationResult:
    """Score every candidate against the profile and return the top matches.

    Args:
        profile: The job seeker's preferences.
        candidates: Already-materialized postings to rank.
        scoring: Dimension budgets; defaults to ScoringConfig().
        ranking: Threshold, limit and pool size; defaults to RankingConfig().
        min_score_threshold: Overrides ranking.min_score_threshold.
        limit: Overrides ranking.limit.
        deadline: Stop dispatching once this time passes (naive means UTC).
        cancel_event: Stop dispatching once this event is set.
        require_preferences: Reject profiles with no populated preference.

    Returns:
        RecommendationResult with ordered results, the skipped count and
        whether the run was cut short.

    Raises:
        InvalidProfileError: If the profile has no subject id, or has no
            preferences while require_preferences is set.
    """
    scoring = scoring or ScoringConfig()
    ranking = ranking or RankingConfig()
    threshold = ranking.min_score_threshold if min_score_threshold is None else min_score_threshold
    limit = ranking.limit if limit is None else limit
    if limit < 0:
        msg = f"limit must not be negative, got {limit}"
        raise ValueError(msg)

    validate_profile(profile, require_preferences=require_preferences)

    if not candidates:
        return RecommendationResult()

    should_stop = _stop_check(deadline, cancel_event)

    # Step 1: Dispatch
    workers = min(ranking.max_workers, len(candidates))
    chunks = [list(candidates[i::workers]) for i in range(workers)]
    logger.debug(
        "[%s] %d postings across %d workers",
        PipelineStage.DISPATCHING.value, len(candidates), workers,
    )
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ranking") as pool:
        futures = [
            pool.submit(_score_chunk, chunk, profile, scoring, should_stop)
            for chunk in chunks
        ]
        batches = [f.result() for f in futures]

    # Step 2: Collect
    scored = [s for b in batches for s in b.scored]
    skipped = sum(b.skipped for b in batches)
    unscored = sum(b.unscored for b in batches)
    partial = unscored > 0
    logger.debug(
        "[%s] %d scored, %d skipped, %d not scored",
        PipelineStage.COLLECTING.value, len(scored), skipped, unscored,
    )
    if partial:
        logger.warning(
            "Ranking for '%s' cancelled with %d of %d postings unscored, returning partial results",
            profile.subject_id, unscored, len(candidates),
        )

    # Step 3: Filter
    kept = [s for s in scored if s.score > threshold]
    logger.debug(
        "[%s] %d of %d above threshold %g",
        PipelineStage.FILTERING.value, len(kept), len(scored), threshold,
    )

    # Step 4: Sort
    kept.sort(key=_rank_key)
    logger.debug("[%s] %d entries ordered", PipelineStage.SORTING.value, len(kept))

    # Step 5: Truncate
    results = kept[:limit]
    logger.debug("[%s] kept %d (limit %d)", PipelineStage.TRUNCATED.value, len(results), limit)

    logger.info(
        "Ranked %d postings for '%s': %d scored, %d skipped, %d returned",
        len(candidates), profile.subject_id, len(scored), skipped, len(results),
    )

    return RecommendationResult(
        results=results,
        skipped_count=skipped,
        scored_count=len(scored),
        partial=partial,
    )


def validate_profile(profile: PreferenceProfile, *, require_preferences: bool = False) -> None:
    """Raise InvalidProfileError if the profile cannot be ranked against."""
    if not profile.subject_id.strip():
        msg = "profile has no subject id"
        raise InvalidProfileError(msg)
    if require_preferences and not profile.has_preferences():
        msg = f"profile '{profile.subject_id}' has no populated preferences"
        raise InvalidProfileError(msg)


def _score_chunk(
    chunk: list[JobPosting],
    profile: PreferenceProfile,
    scoring: ScoringConfig,
    should_stop: StopCheck,
) -> WorkerBatch:
    batch = WorkerBatch()
    for i, posting in enumerate(chunk):
        if should_stop():
            batch.unscored = len(chunk) - i
            break
        result = score_posting(posting, profile, scoring)
        if isinstance(result, MatchScore):
            batch.scored.append(result)
        else:
            batch.skipped += 1
    return batch


def _stop_check(
    deadline: datetime | None,
    cancel_event: threading.Event | None,
) -> StopCheck:
    if deadline is not None and deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)

    def should_stop() -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and datetime.now(timezone.utc) >= deadline

    return should_stop


def _rank_key(s: MatchScore) -> tuple[float, float, str]:
    posted_at = s.posting.posted_at
    # Postings without a timestamp sort after dated ones at the same score.
    ts = posted_at.timestamp() if posted_at is not None else float("-inf")
    return (-s.score, -ts, s.posting_id)
