"""Row adapters — convert raw data-store rows into SearchableEntity objects.

Design rules:
  - The adapter sets ``kind``; nothing downstream sniffs the row shape.
  - Malformed optional fields (coordinates, dates, salary) become None; the row survives.
  - A row without an id, or a posting marked inactive, is skipped (adapter returns None).
  - The original row is kept as ``payload`` for the caller to render.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from nearsearch.core.schemas import (
    CompensationRange,
    EntityKind,
    GeoPoint,
    SalaryFrequency,
    SearchableEntity,
)

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Any]
RowAdapter = Callable[[RawRow], SearchableEntity | None]


def adapt_professional(row: RawRow) -> SearchableEntity | None:
    """Independent professional: headline first, then skills and bio, then identity."""
    entity_id = _row_id(row, "id", "user_id")
    if entity_id is None:
        return None
    first = _text(row.get("first_name"))
    last = _text(row.get("last_name"))
    display = " ".join(p for p in (first, last) if p) or _text(row.get("nickname"))
    return SearchableEntity(
        id=entity_id,
        kind=EntityKind.PROFESSIONAL,
        display_name=display,
        primary_text=_text(row.get("title")),
        secondary_texts=_text_list(row.get("skills")) + [t for t in (_text(row.get("bio")),) if t],
        name_texts=[t for t in (first, last, _text(row.get("nickname"))) if t],
        location=row_location(row),
        compensation=_rate_compensation(row),
        created_at=_timestamp(row.get("created_at")),
        priority=_flag(row, "is_premium", "isPremium", "is_featured"),
        payload=row,
    )


def adapt_company(row: RawRow) -> SearchableEntity | None:
    """Company: trading name first, then services and industry, then description."""
    entity_id = _row_id(row, "id", "user_id")
    if entity_id is None:
        return None
    name = _text(row.get("company_name"))
    secondary = _text_list(row.get("services"))
    industry = _text(row.get("industry"))
    if industry:
        secondary.append(industry)
    return SearchableEntity(
        id=entity_id,
        kind=EntityKind.COMPANY,
        display_name=name,
        primary_text=name,
        secondary_texts=secondary,
        name_texts=[t for t in (_text(row.get("description")),) if t],
        location=row_location(row),
        compensation=_rate_compensation(row),
        created_at=_timestamp(row.get("created_at")),
        priority=_flag(row, "is_premium", "isPremium", "is_featured"),
        payload=row,
    )


def adapt_job_posting(row: RawRow) -> SearchableEntity | None:
    """Job posting: title first, then required skills and job type, then employer and description."""
    entity_id = _row_id(row, "id")
    if entity_id is None:
        return None
    if row.get("is_active") is False:
        logger.debug("Skipping inactive job posting %s", entity_id)
        return None
    secondary = _text_list(row.get("skills_required"))
    for key in ("job_type", "experience_level"):
        value = _text(row.get(key))
        if value:
            secondary.append(value)
    company = row.get("company_profiles")
    company_name = _text(row.get("company_name"))
    if not company_name and isinstance(company, Mapping):
        company_name = _text(company.get("company_name"))
    title = _text(row.get("title"))
    return SearchableEntity(
        id=entity_id,
        kind=EntityKind.JOB_POSTING,
        display_name=title,
        primary_text=title,
        secondary_texts=secondary,
        name_texts=[t for t in (company_name, _text(row.get("description"))) if t],
        location=row_location(row),
        compensation=_salary_compensation(row),
        created_at=_timestamp(row.get("created_at")),
        expires_at=_timestamp(row.get("expires_at")),
        priority=_flag(row, "is_featured", "is_premium", "isPremium"),
        payload=row,
    )


ADAPTERS: dict[EntityKind, RowAdapter] = {
    EntityKind.PROFESSIONAL: adapt_professional,
    EntityKind.COMPANY: adapt_company,
    EntityKind.JOB_POSTING: adapt_job_posting,
}


def adapt_rows(kind: EntityKind, rows: list[RawRow], adapter: RowAdapter | None = None) -> list[SearchableEntity]:
    """Adapt a batch of rows, skipping any that fail."""
    adapter = adapter or ADAPTERS[kind]
    results: list[SearchableEntity] = []
    for row in rows:
        try:
            entity = adapter(row)
        except (TypeError, ValueError):
            logger.debug("Failed to adapt %s row, skipping", kind.value, exc_info=True)
            continue
        if entity is not None:
            results.append(entity)
    skipped = len(rows) - len(results)
    if skipped:
        logger.debug("Adapter %s: skipped %d rows", kind.value, skipped)
    return results


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _row_id(row: RawRow, *keys: str) -> str | None:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _text_list(value: object) -> list[str]:
    """Accept a list of strings or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        items: list[object] = list(value.split(","))
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        return []
    return [t for t in (_text(i) for i in items) if t]


def _flag(row: RawRow, *keys: str) -> bool:
    return any(row.get(key) is True for key in keys)


def row_location(row: RawRow) -> GeoPoint | None:
    lat = row.get("latitude", row.get("lat"))
    lon = row.get("longitude", row.get("lng", row.get("lon")))
    return GeoPoint.from_raw(lat, lon)


def _timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _amount(value: object) -> float | None:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _compensation(minimum: object, maximum: object, frequency: object) -> CompensationRange | None:
    low, high = _amount(minimum), _amount(maximum)
    if low is None and high is None:
        return None
    try:
        return CompensationRange(
            minimum=low,
            maximum=high,
            frequency=SalaryFrequency.parse(frequency or SalaryFrequency.YEARLY),
        )
    except ValueError:
        logger.debug("Dropping malformed compensation %r-%r %r", minimum, maximum, frequency)
        return None


def _salary_compensation(row: RawRow) -> CompensationRange | None:
    return _compensation(row.get("salary_min"), row.get("salary_max"), row.get("salary_frequency"))


def _rate_compensation(row: RawRow) -> CompensationRange | None:
    """Professionals and companies quote a single rate rather than a range."""
    if row.get("hourly_rate") is not None:
        return _compensation(row.get("hourly_rate"), row.get("hourly_rate"), SalaryFrequency.HOURLY)
    if row.get("day_rate") is not None:
        return _compensation(row.get("day_rate"), row.get("day_rate"), SalaryFrequency.DAILY)
    return _salary_compensation(row)
