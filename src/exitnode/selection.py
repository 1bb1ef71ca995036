"""
Exit node selection policies.

Two policies are available:
- Priority fallback: first online candidate in canonical order, no probing
- Two-phase latency search:
  1. Breadth: probe one representative (the first candidate) per country
  2. Depth: probe up to ``per_region`` candidates in each of the
     ``top_regions`` fastest countries whose representative answered
  3. Rank every probed candidate by measured latency

The latency search costs at most ``regions + top_regions * (per_region - 1)``
probes.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Set

from .catalog import canonical_key, online_only
from .constants import PER_REGION, PROBE_CONCURRENCY, TOP_REGIONS
from .errors import NoCandidatesFound, NoOnlineCandidates, NoProbeResponse
from .grouping import group_by_country
from .models import Candidate, RegionGroup
from .probe import Prober
from .ranking import rank_candidates, rank_regions

logger = logging.getLogger(__name__)


def select_by_priority(candidates: Sequence[Candidate]) -> Candidate:
    """
    Pick the most preferred online candidate without probing.

    Raises:
        NoCandidatesFound: when ``candidates`` is empty
        NoOnlineCandidates: when every candidate is offline
    """
    if not candidates:
        raise NoCandidatesFound()
    online = online_only(candidates)
    if not online:
        raise NoOnlineCandidates()
    return min(online, key=canonical_key)


@dataclass
class SelectionReport:
    """Outcome of one latency search."""

    regions: List[RegionGroup] = field(default_factory=list)
    ranked: List[Candidate] = field(default_factory=list)
    probes: int = 0
    interrupted: bool = False

    @property
    def best(self) -> Optional[Candidate]:
        return self.ranked[0] if self.ranked else None


class LatencySelector:
    """Two-phase latency search over online candidates.

    The selector works on copies of the given candidates, so the caller's
    objects never see latency writes. With ``concurrency`` above 1 the probes
    of one phase run in parallel; results are re-sorted afterwards so the
    ranking does not depend on completion order. When ``stop`` is set no new
    probe is started and the measurements taken so far are ranked.
    """

    def __init__(
        self,
        prober: Prober,
        top_regions: int = TOP_REGIONS,
        per_region: int = PER_REGION,
        concurrency: int = PROBE_CONCURRENCY,
        stop: Optional[asyncio.Event] = None,
    ) -> None:
        self.prober = prober
        self.top_regions = top_regions
        self.per_region = per_region
        self.concurrency = max(1, concurrency)
        self.stop = stop

    async def run(self, candidates: Sequence[Candidate]) -> SelectionReport:
        report = SelectionReport()
        working = [replace(c, addresses=list(c.addresses)) for c in candidates]
        groups = group_by_country(working)

        await self._breadth_pass(groups, report)
        report.regions = rank_regions(groups)

        collected = await self._depth_pass(report.regions, report)
        report.ranked = rank_candidates(collected)
        return report

    async def _breadth_pass(self, groups: List[RegionGroup], report: SelectionReport) -> None:
        logger.info(f"Phase 1: Testing one node from each country ({len(groups)} countries)...")
        representatives = [g.candidates[0] for g in groups if g.candidates]
        await self._probe_all(representatives, report)

        for group in groups:
            if not group.candidates:
                continue
            group.best_latency_ms = group.candidates[0].latency_ms
            if group.measured:
                logger.debug(
                    f"  {group.country} ({group.country_code}): {group.best_latency_ms:.0f}ms"
                )

    async def _depth_pass(
        self, regions: List[RegionGroup], report: SelectionReport
    ) -> List[Candidate]:
        # A region whose representative failed is not probed further
        selected = [g for g in regions if g.measured][: self.top_regions]
        logger.info(
            f"Phase 2: Testing top {self.per_region} nodes in each of the top "
            f"{len(selected)} countries..."
        )

        to_probe: List[Candidate] = []
        for group in selected:
            to_probe.extend(group.candidates[1 : self.per_region])
        probed = await self._probe_all(to_probe, report)

        collected: List[Candidate] = []
        for group in selected:
            collected.append(group.candidates[0])
            collected.extend(c for c in group.candidates[1 : self.per_region] if id(c) in probed)
        return collected

    async def _probe_all(self, candidates: List[Candidate], report: SelectionReport) -> Set[int]:
        """Probe each candidate at most once; returns ids of those actually probed."""
        semaphore = asyncio.Semaphore(self.concurrency)
        probed: Set[int] = set()

        async def probe_one(candidate: Candidate) -> None:
            async with semaphore:
                if self.stop is not None and self.stop.is_set():
                    report.interrupted = True
                    return
                report.probes += 1
                candidate.latency_ms = await self.prober.probe(candidate)
                probed.add(id(candidate))

        await asyncio.gather(*(probe_one(c) for c in candidates))
        return probed


async def select_by_latency(
    candidates: Sequence[Candidate],
    prober: Prober,
    top_regions: int = TOP_REGIONS,
    per_region: int = PER_REGION,
    concurrency: int = PROBE_CONCURRENCY,
    stop: Optional[asyncio.Event] = None,
) -> Candidate:
    """
    Pick the lowest latency online candidate with the two-phase search.

    Raises:
        NoCandidatesFound: when ``candidates`` is empty
        NoOnlineCandidates: when every candidate is offline
        NoProbeResponse: when no probed candidate answered
    """
    report = await run_latency_selection(
        candidates, prober, top_regions, per_region, concurrency, stop
    )
    return report.ranked[0]


async def run_latency_selection(
    candidates: Sequence[Candidate],
    prober: Prober,
    top_regions: int = TOP_REGIONS,
    per_region: int = PER_REGION,
    concurrency: int = PROBE_CONCURRENCY,
    stop: Optional[asyncio.Event] = None,
) -> SelectionReport:
    """Like :func:`select_by_latency` but returns the full report."""
    if not candidates:
        raise NoCandidatesFound()
    online = online_only(candidates)
    if not online:
        raise NoOnlineCandidates()

    selector = LatencySelector(prober, top_regions, per_region, concurrency, stop)
    report = await selector.run(online)
    if not report.ranked:
        raise NoProbeResponse()
    return report
