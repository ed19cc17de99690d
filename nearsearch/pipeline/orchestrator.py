"""Orchestrator: wires sources, filter chain, scorer and ranker.

Data flow:
  1. Validate the query
  2. Fetch raw rows from every requested source concurrently (bounding-box hint)
  3. Adapt rows to entities, then run the filter chain per source
  4. Merge all survivors and rank them

Source failures follow ``SearchSettings.on_source_failure``:
  - fail_fast (default): the first failure cancels the other fetches and
    SourceFetchFailure propagates to the caller.
  - degrade: failed kinds are omitted and the response is marked partial.
A source contributes all of its rows or none of them.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from nearsearch.core.config import SearchSettings
from nearsearch.core.errors import InvalidQuery, SourceFetchFailure
from nearsearch.core.schemas import (
    BoundingBox,
    CompensationRange,
    EntityKind,
    GeoPoint,
    ScoredCandidate,
    SearchQuery,
    SearchResponse,
)
from nearsearch.pipeline.geo import bounding_box, miles_to_km
from nearsearch.pipeline.matcher import (
    CompensationFilter,
    ExpiredFilter,
    Filter,
    GeoRadiusFilter,
    RelevanceFilter,
    run_filter_chain,
)
from nearsearch.pipeline.ranker import rank_candidates
from nearsearch.sources.adapters import RawRow
from nearsearch.sources.base import DataSource

logger = logging.getLogger(__name__)


def validate_query(query: SearchQuery | Mapping[str, Any]) -> SearchQuery:
    """Return a validated SearchQuery, raising InvalidQuery on bad input.

    A SearchQuery instance is already valid and is returned as is. Building
    one directly raises pydantic's ValidationError on bad input; pass a
    mapping here or use ``build_query`` to get InvalidQuery instead.
    """
    if isinstance(query, SearchQuery):
        return query
    try:
        return SearchQuery.model_validate(query)
    except ValidationError as exc:
        raise InvalidQuery(str(exc)) from exc


def build_query(
    *,
    term: str | None = None,
    lat: float | None = None,
    lng: float | None = None,
    radius_km: float | None = None,
    radius_miles: float | None = None,
    salary_min: float | None = None,
    salary_max: float | None = None,
    salary_period: str | None = None,
    kinds: list[str] | None = None,
) -> SearchQuery:
    """Build a query from loose, form-style parameters.

    ``radius_miles`` is converted to kilometres; giving both radii is rejected.
    """
    if radius_km is not None and radius_miles is not None:
        msg = "give radius_km or radius_miles, not both"
        raise InvalidQuery(msg)
    if radius_miles is not None:
        radius_km = miles_to_km(radius_miles)
    if (lat is None) != (lng is None):
        msg = "lat and lng must be given together"
        raise InvalidQuery(msg)

    data: dict[str, Any] = {"term": term, "radius_km": radius_km}
    try:
        if lat is not None and lng is not None:
            data["center"] = GeoPoint(latitude=lat, longitude=lng)
        if salary_min is not None or salary_max is not None:
            data["compensation_filter"] = CompensationRange(
                minimum=salary_min,
                maximum=salary_max,
                frequency=salary_period or "yearly",  # type: ignore[arg-type]
            )
    except ValidationError as exc:
        raise InvalidQuery(str(exc)) from exc
    if kinds:
        data["entity_kinds"] = kinds
    return validate_query(data)


async def search(
    query: SearchQuery | Mapping[str, Any],
    sources: Mapping[EntityKind, DataSource],
    settings: SearchSettings | None = None,
    *,
    now: datetime | None = None,
) -> SearchResponse:
    """Run one search across every requested entity kind.

    Kinds without a registered source are skipped. The returned candidates
    are fully ranked; pagination is the caller's job.
    """
    query = validate_query(query)
    settings = settings or SearchSettings()

    active: list[DataSource] = []
    for kind in EntityKind:
        if kind not in query.entity_kinds:
            continue
        source = sources.get(kind)
        if source is None:
            logger.info("No source registered for '%s' - skipping", kind.value)
            continue
        if source.kind != kind:
            logger.warning(
                "Source registered under '%s' serves '%s' - skipping", kind.value, source.kind.value,
            )
            continue
        active.append(source)

    bbox = bounding_box(query.center, query.radius_km) if query.is_geo else None  # type: ignore[arg-type]
    logger.info(
        "Searching term=%r kinds=%s geo=%s salary=%s",
        query.term,
        [s.kind.value for s in active],
        query.is_geo,
        query.compensation_filter is not None,
    )

    fetched, failed = await _fetch_all(active, bbox, settings)

    filters = _build_filters(query, settings, now)
    groups: list[list[ScoredCandidate]] = []
    for source in active:
        if source.kind not in fetched:
            continue
        groups.append(_process_source(source, fetched[source.kind], filters))

    ranked = rank_candidates(*groups)
    logger.info("Search complete: %d results (%d sources failed)", len(ranked), len(failed))
    return SearchResponse(candidates=ranked, partial=bool(failed), failed_kinds=failed)


async def _fetch_all(
    active: list[DataSource],
    bbox: BoundingBox | None,
    settings: SearchSettings,
) -> tuple[dict[EntityKind, list[RawRow]], list[EntityKind]]:
    """Fetch every source concurrently; return rows per kind and the failed kinds."""
    if not active:
        return {}, []

    timeout = settings.fetch_timeout_seconds
    tasks = {
        source.kind: asyncio.ensure_future(_fetch_rows(source, bbox, timeout))
        for source in active
    }
    fail_fast = settings.on_source_failure == "fail_fast"
    try:
        return_when = asyncio.FIRST_EXCEPTION if fail_fast else asyncio.ALL_COMPLETED
        _, pending = await asyncio.wait(tasks.values(), return_when=return_when)
    except asyncio.CancelledError:
        for task in tasks.values():
            task.cancel()
        raise
    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    fetched: dict[EntityKind, list[RawRow]] = {}
    failed: list[EntityKind] = []
    for kind, task in tasks.items():
        if task in pending:
            continue
        if task.cancelled():
            error = SourceFetchFailure(kind.value, "fetch was cancelled")
        else:
            exc = task.exception()
            if exc is None:
                fetched[kind] = task.result()
                continue
            error = exc if isinstance(exc, SourceFetchFailure) else SourceFetchFailure(kind.value, str(exc))
        if fail_fast:
            logger.error("Source '%s' failed, aborting search: %s", kind.value, error)
            raise error
        logger.warning("Source '%s' failed, omitting from results: %s", kind.value, error)
        failed.append(kind)
    return fetched, failed


async def _fetch_rows(
    source: DataSource,
    bbox: BoundingBox | None,
    timeout: float | None,
) -> list[RawRow]:
    kind = source.kind.value
    try:
        if timeout is None:
            rows = await source.fetch(bbox)
        else:
            rows = await asyncio.wait_for(source.fetch(bbox), timeout)
    except asyncio.TimeoutError as exc:
        raise SourceFetchFailure(kind, f"timed out after {timeout}s") from exc
    except SourceFetchFailure:
        raise
    except Exception as exc:
        raise SourceFetchFailure(kind, str(exc) or type(exc).__name__) from exc
    logger.debug("Source '%s' returned %d rows", kind, len(rows))
    return list(rows)


def _process_source(
    source: DataSource,
    rows: list[RawRow],
    filters: list[Filter],
) -> list[ScoredCandidate]:
    entities = source.adapt(rows)
    candidates = [ScoredCandidate(entity=e) for e in entities]
    survivors = run_filter_chain(candidates, filters)
    logger.info(
        "Source '%s': %d raw, %d adapted, %d matched",
        source.kind.value, len(rows), len(entities), len(survivors),
    )
    return survivors


def _build_filters(
    query: SearchQuery,
    settings: SearchSettings,
    now: datetime | None,
) -> list[Filter]:
    """Build the filter chain for a query (cheap filters first, scoring last)."""
    filters: list[Filter] = []
    if settings.exclude_expired:
        filters.append(ExpiredFilter(now))
    if query.center is not None and query.radius_km is not None:
        filters.append(GeoRadiusFilter(query.center, query.radius_km))
    if query.compensation_filter is not None:
        filters.append(CompensationFilter(query.compensation_filter, settings.missing_compensation))
    filters.append(RelevanceFilter(query.term))
    return filters


def export_results_json(response: SearchResponse) -> str:
    """Export ranked results as a JSON string."""
    data = []
    for rank, c in enumerate(response.candidates, start=1):
        e = c.entity
        data.append({
            "rank": rank,
            "kind": e.kind.value,
            "id": e.id,
            "display_name": e.display_name,
            "primary_text": e.primary_text,
            "relevance_score": c.relevance_score,
            "distance_km": round(c.distance_km, 2) if c.distance_km is not None else None,
            "priority": e.priority,
            "created_at": e.created_at.isoformat() if e.created_at else None,
            "payload": e.payload,
        })
    return json.dumps(
        {
            "partial": response.partial,
            "failed_kinds": [k.value for k in response.failed_kinds],
            "results": data,
        },
        indent=2,
        default=str,
    )
