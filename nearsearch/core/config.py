"""Configuration models and YAML loader for the nearby search engine.

Only policy lives here. Algorithm constants (Earth radius, pay-frequency
factors, relevance tiers) are module constants in the pipeline and are not
configurable.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from nearsearch.core.schemas import EntityKind

MissingCompensationPolicy = Literal["include", "exclude"]
SourceFailurePolicy = Literal["fail_fast", "degrade"]


class SearchSettings(BaseModel):
    """Orchestrator policies."""

    # Entities without compensation data when a salary filter is active.
    missing_compensation: MissingCompensationPolicy = "exclude"
    on_source_failure: SourceFailurePolicy = "fail_fast"
    fetch_timeout_seconds: float | None = Field(default=None, gt=0.0)
    exclude_expired: bool = True
    default_radius_miles: float = Field(default=10.0, gt=0.0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    search: SearchSettings = Field(default_factory=SearchSettings)
    sources: dict[EntityKind, str] = Field(default_factory=dict)

    @field_validator("sources", mode="before")
    @classmethod
    def parse_source_kinds(cls, v: Any) -> dict[EntityKind, str]:
        if v is None:
            return {}
        if not isinstance(v, dict):
            msg = "sources must map entity kinds to file paths"
            raise ValueError(msg)
        return {EntityKind.parse(k): path for k, path in v.items()}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file.

        Relative source paths are resolved against the settings file's directory.
        """
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        settings = cls.model_validate(raw)
        base = path.parent
        settings.sources = {
            kind: str(p if Path(p).is_absolute() else base / p)
            for kind, p in settings.sources.items()
        }
        return settings
