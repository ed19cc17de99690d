"""Core data models for the nearby search engine.

All models are transient: built per request, discarded after the response.
Value types are frozen; the engine never mutates an entity it was handed.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EntityKind(str, Enum):
    """Discriminant for the searchable entity variants."""

    PROFESSIONAL = "professional"
    COMPANY = "company"
    JOB_POSTING = "job_posting"

    @classmethod
    def parse(cls, value: object) -> "EntityKind":
        """Resolve a kind from its name, raising ValueError for unknown kinds."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = _KIND_ALIASES.get(key, key)
            for member in cls:
                if member.value == key:
                    return member
        msg = f"unknown entity kind: {value!r}"
        raise ValueError(msg)


_KIND_ALIASES = {
    "independent_professional": "professional",
    "job": "job_posting",
}


class SalaryFrequency(str, Enum):
    """Pay frequency of a compensation amount. Closed set."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: object) -> "SalaryFrequency":
        """Resolve a frequency, accepting the ``per_hour`` style spellings.

        Unknown values raise ValueError; they are never coerced to yearly.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = _FREQUENCY_ALIASES.get(key, key)
            for member in cls:
                if member.value == key:
                    return member
        msg = f"unknown salary frequency: {value!r}"
        raise ValueError(msg)


_FREQUENCY_ALIASES = {
    "per_hour": "hourly",
    "per_day": "daily",
    "per_week": "weekly",
    "per_month": "monthly",
    "per_year": "yearly",
    "annual": "yearly",
    "annually": "yearly",
}


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    @classmethod
    def from_raw(cls, latitude: object, longitude: object) -> "GeoPoint | None":
        """Build a point from untrusted row values.

        Returns None for missing, non-numeric, NaN or out-of-range input so that
        callers treat the row as having no location.
        """
        if latitude is None or longitude is None:
            return None
        if isinstance(latitude, bool) or isinstance(longitude, bool):
            return None
        try:
            return cls(latitude=float(latitude), longitude=float(longitude))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None


class BoundingBox(BaseModel):
    """Axis-aligned lat/lon rectangle used as an over-inclusive pre-filter."""

    model_config = ConfigDict(frozen=True)

    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.lat_min <= point.latitude <= self.lat_max
            and self.lon_min <= point.longitude <= self.lon_max
        )


class CompensationRange(BaseModel):
    """A pay range at one frequency. Either bound may be absent."""

    model_config = ConfigDict(frozen=True)

    minimum: float | None = Field(default=None, allow_inf_nan=False)
    maximum: float | None = Field(default=None, allow_inf_nan=False)
    frequency: SalaryFrequency = SalaryFrequency.YEARLY

    @field_validator("frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v: object) -> SalaryFrequency:
        return SalaryFrequency.parse(v)

    @model_validator(mode="after")
    def bounds_ordered(self) -> "CompensationRange":
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            msg = f"minimum ({self.minimum}) must not exceed maximum ({self.maximum})"
            raise ValueError(msg)
        return self


class SearchableEntity(BaseModel):
    """One searchable record, normalised by a per-kind row adapter.

    ``kind`` is set by the adapter at construction time and never inferred
    downstream. ``payload`` is the original row, carried through untouched so
    the caller can render kind-specific detail.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: EntityKind
    display_name: str = ""
    primary_text: str = ""
    secondary_texts: list[str] = Field(default_factory=list)
    name_texts: list[str] = Field(default_factory=list)
    location: GeoPoint | None = None
    compensation: CompensationRange | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    priority: bool = False
    payload: Any = None

    @property
    def text_fields(self) -> list[str]:
        """Every string eligible for relevance matching."""
        fields = [self.primary_text] if self.primary_text else []
        return fields + list(self.secondary_texts) + list(self.name_texts)


class SearchQuery(BaseModel):
    """A single search request.

    ``center`` and ``radius_km`` come as a pair: one without the other is rejected.
    """

    model_config = ConfigDict(frozen=True)

    term: str | None = None
    center: GeoPoint | None = None
    radius_km: float | None = Field(default=None, ge=0.0, allow_inf_nan=False)
    compensation_filter: CompensationRange | None = None
    entity_kinds: frozenset[EntityKind] = Field(default_factory=lambda: frozenset(EntityKind))

    @field_validator("term")
    @classmethod
    def blank_term_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("entity_kinds", mode="before")
    @classmethod
    def parse_kinds(cls, v: object) -> frozenset[EntityKind]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set, frozenset)):
            msg = "entity_kinds must be a collection of kinds"
            raise ValueError(msg)
        kinds = frozenset(EntityKind.parse(k) for k in v)
        if not kinds:
            msg = "at least one entity kind must be requested"
            raise ValueError(msg)
        return kinds

    @model_validator(mode="after")
    def center_and_radius_paired(self) -> "SearchQuery":
        if (self.center is None) != (self.radius_km is None):
            msg = "center and radius_km must be given together"
            raise ValueError(msg)
        return self

    @property
    def is_geo(self) -> bool:
        return self.center is not None and self.radius_km is not None


class ScoredCandidate(BaseModel):
    """An entity that survived filtering, with its relevance and distance."""

    model_config = ConfigDict(frozen=True)

    entity: SearchableEntity
    relevance_score: float = Field(default=0.0, ge=0.0)
    distance_km: float | None = None

    @field_validator("distance_km")
    @classmethod
    def finite_distance(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            msg = "distance_km must be finite"
            raise ValueError(msg)
        return v


class SearchResponse(BaseModel):
    """Ranked search output.

    ``partial`` is True when one or more sources failed and were omitted
    under the degrade policy; ``failed_kinds`` names them.
    """

    candidates: list[ScoredCandidate] = Field(default_factory=list)
    partial: bool = False
    failed_kinds: list[EntityKind] = Field(default_factory=list)
