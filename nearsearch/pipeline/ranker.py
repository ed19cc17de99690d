"""Merge scored candidates from every source into one ordered list.

Order: priority first, then relevance, then newest. Python's sort is stable,
so candidates equal on all three keys keep their input order.
"""

import math
from collections.abc import Iterable

from nearsearch.core.schemas import ScoredCandidate


def rank_key(candidate: ScoredCandidate) -> tuple[bool, float, float]:
    entity = candidate.entity
    # Missing created_at sorts as the oldest possible value.
    created = entity.created_at.timestamp() if entity.created_at is not None else -math.inf
    return (not entity.priority, -candidate.relevance_score, -created)


def rank_candidates(*groups: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
    """Merge any number of candidate groups into one deterministic ranking."""
    merged = [c for group in groups for c in group]
    return sorted(merged, key=rank_key)
