"""
Deterministic ordering of probed candidates and region groups.

Measured values always sort before the ``UNMEASURED`` sentinel. Ties are
broken by fixed keys so that the order never depends on probe completion.
"""

from typing import List, Sequence, Tuple

from .catalog import canonical_key
from .models import Candidate, RegionGroup


def candidate_rank_key(candidate: Candidate) -> Tuple:
    if candidate.measured:
        return (0, candidate.latency_ms, canonical_key(candidate))
    # Unmeasured: priority first, canonical order breaks remaining ties
    return (1, 0.0, canonical_key(candidate))


def region_rank_key(group: RegionGroup) -> Tuple:
    if group.measured:
        return (0, group.best_latency_ms, group.country_code)
    return (1, 0.0, group.country_code)


def rank_candidates(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Return a new list: fastest measured first, unmeasured last by priority."""
    return sorted(candidates, key=candidate_rank_key)


def rank_regions(groups: Sequence[RegionGroup]) -> List[RegionGroup]:
    """Return a new list: fastest representative first, failed regions by country code."""
    return sorted(groups, key=region_rank_key)
