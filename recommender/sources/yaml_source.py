"""File-backed posting and profile sources.

Files are YAML (JSON is accepted too) holding either a top-level list of
records or a mapping with a `postings` / `profiles` list. Files are re-read
on every call since postings and profiles change between requests.
"""

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from recommender.core.schemas import JobPosting, PreferenceProfile
from recommender.sources.base import PostingSource, ProfileSource, SearchContext

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def load_records(path: str | Path, key: str) -> list[dict[str, Any]]:
    """Read a list of mappings from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file does not contain a list of mappings.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise FileNotFoundError(msg)
    raw = yaml.safe_load(path.read_text()) or []
    if isinstance(raw, dict):
        raw = raw.get(key, [])
    if not isinstance(raw, list) or not all(isinstance(r, dict) for r in raw):
        msg = f"{path}: expected a list of {key} records"
        raise ValueError(msg)
    return raw


class YamlPostingSource(PostingSource):
    """Postings read from a YAML file, newest first.

    Records that fail validation are logged and dropped.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    async def fetch_postings(self, context: SearchContext) -> list[JobPosting]:
        records = await asyncio.to_thread(load_records, self._path, "postings")

        postings: list[JobPosting] = []
        for i, record in enumerate(records):
            try:
                postings.append(JobPosting.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    "Dropping posting record #%d (%s) from %s: %s",
                    i, record.get("posting_id", "?"), self._path, e.errors()[0]["msg"],
                )

        if context.active_only:
            postings = [p for p in postings if p.is_active]
        if context.employment_types:
            allowed = set(context.employment_types)
            postings = [p for p in postings if p.employment_type in allowed]

        postings.sort(key=lambda p: p.posted_at or _OLDEST, reverse=True)
        page = postings[: context.limit]
        logger.debug("Fetched %d postings from %s (%d matched)", len(page), self._path, len(postings))
        return page


class YamlProfileSource(ProfileSource):
    """Profiles read from a YAML file, looked up by subject_id."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    async def get_profile(self, subject_id: str) -> PreferenceProfile:
        records = await asyncio.to_thread(load_records, self._path, "profiles")
        for record in records:
            if str(record.get("subject_id", "")) == subject_id:
                return PreferenceProfile.model_validate(record)
        msg = f"No profile for subject '{subject_id}' in {self._path}"
        raise LookupError(msg)
