"""Posting and profile source registry.

Usage:
    from recommender.sources import get_posting_source, get_profile_source

    postings = get_posting_source("data/postings.yaml")
    profiles = get_profile_source("config/profiles.yaml")
"""

from pathlib import Path

from recommender.sources.base import PostingSource, ProfileSource, SearchContext
from recommender.sources.yaml_source import YamlPostingSource, YamlProfileSource

__all__ = [
    "PostingSource",
    "ProfileSource",
    "SearchContext",
    "get_posting_source",
    "get_profile_source",
]

# Maps file suffix → (posting source, profile source)
_REGISTRY: dict[str, tuple[type[PostingSource], type[ProfileSource]]] = {
    ".yaml": (YamlPostingSource, YamlProfileSource),
    ".yml": (YamlPostingSource, YamlProfileSource),
    ".json": (YamlPostingSource, YamlProfileSource),
}


def _lookup(path: str | Path) -> tuple[type[PostingSource], type[ProfileSource]]:
    suffix = Path(path).suffix.lower()
    if suffix not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unsupported data file '{path}'. Supported suffixes: {valid}"
        raise ValueError(msg)
    return _REGISTRY[suffix]


def get_posting_source(path: str | Path) -> PostingSource:
    """Return a posting source for a data file, chosen by suffix."""
    posting_cls, _ = _lookup(path)
    return posting_cls(path)  # type: ignore[call-arg]


def get_profile_source(path: str | Path) -> ProfileSource:
    """Return a profile source for a data file, chosen by suffix."""
    _, profile_cls = _lookup(path)
    return profile_cls(path)  # type: ignore[call-arg]
