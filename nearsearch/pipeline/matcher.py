"""Filter chain applied to each source's candidates.

Filter order:
  1. ExpiredFilter       — drops postings whose expires_at has passed
  2. GeoRadiusFilter     — exact haversine check, records distance_km
  3. CompensationFilter  — annualised range overlap, explicit missing-data policy
  4. RelevanceFilter     — tiered score, drops zero scores when a term was given

Every filter takes and returns a list of ScoredCandidate. Filters never raise
on malformed rows; they drop them.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from nearsearch.core.config import MissingCompensationPolicy
from nearsearch.core.schemas import CompensationRange, GeoPoint, ScoredCandidate
from nearsearch.pipeline.geo import within_radius
from nearsearch.pipeline.salary import ranges_overlap
from nearsearch.pipeline.scorer import normalize_term, score_entity

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset.
Filter = Callable[[list[ScoredCandidate]], list[ScoredCandidate]]


class ExpiredFilter:
    """Remove entities whose expiry time is at or before ``now``."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime.now(timezone.utc)

    def __call__(self, candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
        result = [c for c in candidates if not self._expired(c)]
        removed = len(candidates) - len(result)
        if removed:
            logger.debug("ExpiredFilter: removed %d expired candidates", removed)
        return result

    def _expired(self, candidate: ScoredCandidate) -> bool:
        expires_at = candidate.entity.expires_at
        if expires_at is None:
            return False
        return expires_at.timestamp() <= self._now.timestamp()


class GeoRadiusFilter:
    """Keep candidates inside the search circle and record their distance.

    Entities without a location are always removed.
    """

    def __init__(self, center: GeoPoint, radius_km: float) -> None:
        self._center = center
        self._radius_km = radius_km

    def __call__(self, candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
        result: list[ScoredCandidate] = []
        no_location = 0
        for c in candidates:
            if c.entity.location is None:
                no_location += 1
                continue
            distance = within_radius(self._center, c.entity.location, self._radius_km)
            if distance is not None:
                result.append(c.model_copy(update={"distance_km": distance}))
        removed = len(candidates) - len(result)
        if removed:
            logger.debug(
                "GeoRadiusFilter: removed %d candidates (%d without location)",
                removed, no_location,
            )
        return result


class CompensationFilter:
    """Keep candidates whose compensation overlaps the requested range.

    Entities with no compensation at all follow ``missing_policy``.
    """

    def __init__(
        self,
        query_range: CompensationRange,
        missing_policy: MissingCompensationPolicy = "exclude",
    ) -> None:
        self._query_range = query_range
        self._keep_missing = missing_policy == "include"

    def __call__(self, candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
        result = [c for c in candidates if self._matches(c)]
        removed = len(candidates) - len(result)
        if removed:
            logger.debug("CompensationFilter: removed %d candidates", removed)
        return result

    def _matches(self, candidate: ScoredCandidate) -> bool:
        compensation = candidate.entity.compensation
        if compensation is None:
            return self._keep_missing
        return ranges_overlap(self._query_range, compensation)


class RelevanceFilter:
    """Score every candidate against the term.

    With an empty term every candidate keeps a 0.0 score and nothing is dropped.
    """

    def __init__(self, term: str | None) -> None:
        self._term = normalize_term(term)

    def __call__(self, candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
        if not self._term:
            return candidates
        result: list[ScoredCandidate] = []
        for c in candidates:
            score = score_entity(c.entity, self._term)
            if score > 0.0:
                result.append(c.model_copy(update={"relevance_score": score}))
        removed = len(candidates) - len(result)
        if removed:
            logger.debug("RelevanceFilter: removed %d non-matching candidates", removed)
        return result


def run_filter_chain(
    candidates: list[ScoredCandidate],
    filters: list[Filter],
) -> list[ScoredCandidate]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result
