"""
High level operations used by the CLI.

Each operation receives its collaborators (status source, prober, committer)
and an explicit :class:`SelectionOptions`; nothing here reads global state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .catalog import build_catalog, filter_by_country, find_candidate, online_only
from .commit import CommitResult, PreferenceCommitter
from .config import SelectionOptions
from .constants import MULLVAD_SUFFIX
from .errors import NoCandidatesFound, NoCandidatesForRegion, NoOnlineCandidates
from .models import Candidate, ExitNodeStatus, SessionStatus
from .probe import Prober
from .selection import SelectionReport, run_latency_selection, select_by_priority

logger = logging.getLogger(__name__)


class StatusSource(Protocol):
    async def status(self) -> SessionStatus: ...

    async def status_without_peers(self) -> SessionStatus: ...


@dataclass
class SelectionOutcome:
    candidate: Candidate
    commit: CommitResult
    report: Optional[SelectionReport] = None


async def check_exit_node(source: StatusSource) -> Optional[ExitNodeStatus]:
    """Return the active exit node, or ``None`` when traffic is unprotected."""
    status = await source.status_without_peers()
    if status.exit_node_active:
        logger.debug(
            f"Exit node active: id={status.exit_node.id} ips={status.exit_node.addresses}"
        )
        return status.exit_node
    return None


async def load_catalog(source: StatusSource, suffix: str = MULLVAD_SUFFIX) -> List[Candidate]:
    status = await source.status()
    return build_catalog(status.peers, suffix)


async def choose_candidate(
    candidates: Sequence[Candidate],
    options: SelectionOptions,
    prober: Optional[Prober] = None,
    stop: Optional[asyncio.Event] = None,
) -> tuple[Candidate, Optional[SelectionReport]]:
    """
    Apply the country and online filters, then the configured policy.

    Raises:
        NoCandidatesFound, NoCandidatesForRegion, NoOnlineCandidates,
        NoProbeResponse
    """
    if not candidates:
        raise NoCandidatesFound()

    if options.country:
        candidates = filter_by_country(candidates, options.country)
        if not candidates:
            raise NoCandidatesForRegion(options.country)

    online = online_only(candidates)
    if not online:
        raise NoOnlineCandidates()

    if options.prefer_priority or prober is None:
        return select_by_priority(online), None

    report = await run_latency_selection(
        online,
        prober,
        top_regions=options.top_regions,
        per_region=options.per_region,
        concurrency=options.concurrency,
        stop=stop,
    )
    if report.interrupted:
        logger.warning(f"Latency testing interrupted after {report.probes} probes")
    return report.ranked[0], report


async def auto_select(
    source: StatusSource,
    committer: PreferenceCommitter,
    options: SelectionOptions,
    prober: Optional[Prober] = None,
    stop: Optional[asyncio.Event] = None,
) -> SelectionOutcome:
    candidates = await load_catalog(source, options.provider_suffix)
    candidate, report = await choose_candidate(candidates, options, prober, stop)
    logger.info(
        f"Selected {candidate.hostname} ({candidate.location}) priority={candidate.priority}"
    )
    result = await committer.commit(candidate)
    return SelectionOutcome(candidate=candidate, commit=result, report=report)


async def set_exit_node_by_name(
    source: StatusSource,
    committer: PreferenceCommitter,
    name: str,
    suffix: str = MULLVAD_SUFFIX,
) -> SelectionOutcome:
    candidates = await load_catalog(source, suffix)
    candidate = find_candidate(candidates, name)
    result = await committer.commit(candidate)
    return SelectionOutcome(candidate=candidate, commit=result)


async def disable_exit_node(committer: PreferenceCommitter) -> CommitResult:
    return await committer.commit(None)
