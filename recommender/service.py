"""Recommendation service: wires profile source, posting source and ranking.

Data flow:
  1. Cache lookup (optional, time-boxed)
  2. Profile source → PreferenceProfile
  3. Posting source → candidate postings (fetch completes before scoring)
  4. Ranking pipeline in a worker thread → RecommendationResult
  5. Cache store (complete results only)
"""

import asyncio
import json
import logging
import threading
import time
from datetime import datetime, timedelta, timezone

from recommender.core.config import Settings
from recommender.core.schemas import RecommendationResult
from recommender.pipeline.ranking import rank_postings
from recommender.sources.base import PostingSource, ProfileSource, SearchContext

logger = logging.getLogger(__name__)

CacheKey = tuple[str, float | None, int | None]


class RecommendationService:
    """Entry point the API layer calls to get recommendations for a user.

    Usage::

        service = RecommendationService(postings, profiles, settings)
        result = await service.recommend("user-42", limit=10)
    """

    def __init__(
        self,
        postings: PostingSource,
        profiles: ProfileSource,
        settings: Settings | None = None,
    ) -> None:
        self._postings = postings
        self._profiles = profiles
        self._settings = settings or Settings()
        self._cache: dict[CacheKey, tuple[float, RecommendationResult]] = {}

    async def recommend(
        self,
        subject_id: str,
        *,
        min_score_threshold: float | None = None,
        limit: int | None = None,
        timeout: float | None = None,
        context: SearchContext | None = None,
    ) -> RecommendationResult:
        """Rank the current candidate postings for one subject.

        Args:
            subject_id: Whose profile to rank against.
            min_score_threshold: Overrides the configured threshold.
            limit: Overrides the configured result size.
            timeout: Seconds before the ranking run stops dispatching and
                returns a partial result.
            context: Custom search context; bypasses the cache.

        Raises:
            LookupError: If the profile source has no such subject.
            InvalidProfileError: If the profile cannot be ranked against.
        """
        config = self._settings.service
        deadline = (
            datetime.now(timezone.utc) + timedelta(seconds=timeout)
            if timeout is not None
            else None
        )
        key: CacheKey = (subject_id, min_score_threshold, limit)
        use_cache = config.cache_ttl_seconds > 0 and context is None

        # Step 1: Cache lookup
        if use_cache:
            cached = self._cache_get(key)
            if cached is not None:
                logger.debug("Cache hit for '%s'", subject_id)
                return cached

        # Step 2: Profile
        profile = await self._profiles.get_profile(subject_id)

        # Step 3: Candidates
        if context is None:
            context = SearchContext(limit=config.candidate_limit, active_only=config.active_only)
        postings = await self._postings.fetch_postings(context)
        logger.info("Ranking %d candidate postings for '%s'", len(postings), subject_id)

        # Step 4: Rank
        cancel_event = threading.Event()
        try:
            result = await asyncio.to_thread(
                rank_postings,
                profile,
                postings,
                self._settings.scoring,
                self._settings.ranking,
                min_score_threshold=min_score_threshold,
                limit=limit,
                deadline=deadline,
                cancel_event=cancel_event,
                require_preferences=config.require_preferences,
            )
        except asyncio.CancelledError:
            cancel_event.set()
            raise

        # Step 5: Cache
        if use_cache and not result.partial:
            now = time.monotonic()
            self._purge_expired(now)
            self._cache[key] = (now + config.cache_ttl_seconds, result)

        return result

    def clear_cache(self) -> None:
        self._cache.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._cache.items() if now >= expires_at]
        for k in expired:
            del self._cache[k]

    def _cache_get(self, key: CacheKey) -> RecommendationResult | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, result = entry
        if time.monotonic() >= expires_at:
            del self._cache[key]
            return None
        return result


def export_results_json(result: RecommendationResult) -> str:
    """Export a recommendation result as a JSON string."""
    data = {
        "skipped_count": result.skipped_count,
        "partial": result.partial,
        "recommendations": [
            {
                "posting_id": m.posting_id,
                "title": m.posting.title,
                "location": m.posting.location,
                "employer_id": m.posting.employer_id,
                "posted_at": m.posting.posted_at.isoformat() if m.posting.posted_at else None,
                "score": round(m.score, 2),
                "label": m.label,
                "reasons": [
                    {"dimension": c.dimension.value, "points": round(c.points, 2), "reason": c.reason}
                    for c in m.contributions
                ],
            }
            for m in result.results
        ],
    }
    return json.dumps(data, indent=2)
