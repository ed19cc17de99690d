"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from nearsearch.core.config import SearchSettings, Settings
from nearsearch.core.schemas import EntityKind


class TestSearchSettings:
    def test_defaults(self) -> None:
        s = SearchSettings()
        assert s.missing_compensation == "exclude"
        assert s.on_source_failure == "fail_fast"
        assert s.fetch_timeout_seconds is None
        assert s.exclude_expired is True
        assert s.default_radius_miles == 10.0

    def test_invalid_policy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchSettings(missing_compensation="maybe")  # type: ignore[arg-type]
        with pytest.raises(ValidationError):
            SearchSettings(on_source_failure="retry")  # type: ignore[arg-type]

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SearchSettings(fetch_timeout_seconds=0)


class TestSettings:
    def test_empty_defaults(self) -> None:
        s = Settings()
        assert s.sources == {}
        assert isinstance(s.search, SearchSettings)

    def test_source_kinds_parsed(self) -> None:
        s = Settings(sources={"independent_professional": "p.json", "job_posting": "j.json"})  # type: ignore[dict-item]
        assert set(s.sources) == {EntityKind.PROFESSIONAL, EntityKind.JOB_POSTING}

    def test_unknown_source_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(sources={"homeowner": "h.json"})  # type: ignore[dict-item]


class TestFromYaml:
    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(dedent("""\
            search:
              missing_compensation: include
              on_source_failure: degrade
              fetch_timeout_seconds: 5
            sources:
              company: data/companies.json
              job_posting: /abs/jobs.yaml
        """))
        s = Settings.from_yaml(config_file)
        assert s.search.missing_compensation == "include"
        assert s.search.on_source_failure == "degrade"
        assert s.search.fetch_timeout_seconds == 5
        assert s.sources[EntityKind.COMPANY] == str(tmp_path / "data" / "companies.json")
        assert s.sources[EntityKind.JOB_POSTING] == "/abs/jobs.yaml"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")
        s = Settings.from_yaml(config_file)
        assert s.search.on_source_failure == "fail_fast"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml_values(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("search:\n  missing_compensation: sometimes\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)
