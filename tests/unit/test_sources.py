"""Tests for YAML-backed posting and profile sources."""

import logging
from pathlib import Path
from textwrap import dedent

import pytest

from recommender.core.schemas import EmploymentType
from recommender.sources import get_posting_source, get_profile_source
from recommender.sources.base import SearchContext
from recommender.sources.yaml_source import YamlPostingSource, YamlProfileSource, load_records

POSTINGS_YAML = dedent("""\
    postings:
      - posting_id: "job-1"
        title: Senior Frontend Engineer
        location: San Francisco, CA
        skills: [React, TypeScript]
        employment_type: full-time
        posted_at: 2024-01-10T12:00:00Z
      - posting_id: "job-2"
        title: Contract React Developer
        location: Remote
        employment_type: contract
        posted_at: 2024-01-12T12:00:00Z
      - posting_id: "job-3"
        title: Old Listing
        is_active: false
        posted_at: 2024-01-11T12:00:00Z
      - posting_id: "job-4"
        title: Undated Listing
      - posting_id: "job-5"
        title: Broken Salary
        salary_min: 200000
        salary_max: 100000
""")

PROFILES_YAML = dedent("""\
    profiles:
      - subject_id: "user-1"
        skills: [React]
        seniority: senior
      - subject_id: "user-2"
""")


@pytest.fixture
def postings_file(tmp_path: Path) -> Path:
    path = tmp_path / "postings.yaml"
    path.write_text(POSTINGS_YAML)
    return path


@pytest.fixture
def profiles_file(tmp_path: Path) -> Path:
    path = tmp_path / "profiles.yaml"
    path.write_text(PROFILES_YAML)
    return path


class TestLoadRecords:
    def test_mapping_with_key(self, postings_file: Path) -> None:
        assert len(load_records(postings_file, "postings")) == 5

    def test_top_level_list(self, tmp_path: Path) -> None:
        path = tmp_path / "postings.yaml"
        path.write_text("- posting_id: a\n  title: A\n")
        assert load_records(path, "postings") == [{"posting_id": "a", "title": "A"}]

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "postings.yaml"
        path.write_text("")
        assert load_records(path, "postings") == []

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "postings.json"
        path.write_text('{"postings": [{"posting_id": "a", "title": "A"}]}')
        assert load_records(path, "postings") == [{"posting_id": "a", "title": "A"}]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Data file not found"):
            load_records(tmp_path / "nope.yaml", "postings")

    def test_not_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "postings.yaml"
        path.write_text("postings: just a string\n")
        with pytest.raises(ValueError, match="expected a list"):
            load_records(path, "postings")


class TestYamlPostingSource:
    async def test_active_only_newest_first(self, postings_file: Path) -> None:
        source = YamlPostingSource(postings_file)
        postings = await source.fetch_postings(SearchContext())
        assert [p.posting_id for p in postings] == ["job-2", "job-1", "job-4"]

    async def test_include_inactive(self, postings_file: Path) -> None:
        source = YamlPostingSource(postings_file)
        postings = await source.fetch_postings(SearchContext(active_only=False))
        assert [p.posting_id for p in postings] == ["job-2", "job-3", "job-1", "job-4"]

    async def test_limit(self, postings_file: Path) -> None:
        source = YamlPostingSource(postings_file)
        postings = await source.fetch_postings(SearchContext(limit=1))
        assert [p.posting_id for p in postings] == ["job-2"]

    async def test_employment_type_filter(self, postings_file: Path) -> None:
        source = YamlPostingSource(postings_file)
        context = SearchContext(employment_types=[EmploymentType.FULL_TIME])
        postings = await source.fetch_postings(context)
        assert [p.posting_id for p in postings] == ["job-1"]

    async def test_invalid_record_dropped_and_logged(
        self, postings_file: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        source = YamlPostingSource(postings_file)
        with caplog.at_level(logging.WARNING, logger="recommender.sources.yaml_source"):
            postings = await source.fetch_postings(SearchContext(active_only=False))
        assert "job-5" not in [p.posting_id for p in postings]
        assert "Dropping posting record #4 (job-5)" in caplog.text

    async def test_structurally_invalid_posting_passed_through(self, tmp_path: Path) -> None:
        path = tmp_path / "postings.yaml"
        path.write_text("- title: No Id\n")
        postings = await YamlPostingSource(path).fetch_postings(SearchContext())
        assert len(postings) == 1
        assert postings[0].posting_id == ""


class TestYamlProfileSource:
    async def test_lookup(self, profiles_file: Path) -> None:
        profile = await YamlProfileSource(profiles_file).get_profile("user-1")
        assert profile.skills == ["React"]
        assert profile.seniority is not None

    async def test_empty_profile(self, profiles_file: Path) -> None:
        profile = await YamlProfileSource(profiles_file).get_profile("user-2")
        assert profile.has_preferences() is False

    async def test_unknown_subject(self, profiles_file: Path) -> None:
        with pytest.raises(LookupError, match="No profile for subject 'user-9'"):
            await YamlProfileSource(profiles_file).get_profile("user-9")


class TestRegistry:
    @pytest.mark.parametrize("name", ["postings.yaml", "postings.yml", "postings.JSON"])
    def test_supported_suffixes(self, name: str) -> None:
        assert isinstance(get_posting_source(name), YamlPostingSource)
        assert isinstance(get_profile_source(name), YamlProfileSource)

    def test_unsupported_suffix(self) -> None:
        with pytest.raises(ValueError, match="Unsupported data file"):
            get_posting_source("postings.csv")
