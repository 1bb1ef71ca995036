"""
Candidate catalog: which peers can be used as exit nodes, in what order.

The canonical order (ascending priority, online before offline, then routing
name) is the "cheap" ordering used whenever latency data is unavailable.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from .constants import MULLVAD_SUFFIX
from .errors import CandidateNotFound
from .models import Candidate, PeerStatus

logger = logging.getLogger(__name__)


def canonical_key(candidate: Candidate) -> Tuple[int, bool, str]:
    return (candidate.priority, not candidate.online, candidate.dns_name)


def build_catalog(peers: Iterable[PeerStatus], suffix: str = MULLVAD_SUFFIX) -> List[Candidate]:
    """
    Turn a peer snapshot into exit node candidates in canonical order.

    Only peers that advertise the exit node option and whose routing name ends
    with ``suffix`` are kept. Peers without location metadata stay in the
    catalog with empty location fields and priority 0.

    Args:
        peers: Peers from the daemon status
        suffix: Provider domain suffix, including the trailing dot

    Returns:
        New list of candidates sorted by :func:`canonical_key`
    """
    candidates: List[Candidate] = []
    for peer in peers:
        if not peer.exit_node_option or not peer.dns_name.endswith(suffix):
            continue
        candidate = Candidate(
            id=peer.id,
            dns_name=peer.dns_name,
            online=peer.online,
            addresses=list(peer.addresses),
        )
        if peer.location is not None:
            candidate.country = peer.location.country
            candidate.country_code = peer.location.country_code
            candidate.city = peer.location.city
            candidate.city_code = peer.location.city_code
            candidate.priority = peer.location.priority
        candidates.append(candidate)

    candidates.sort(key=canonical_key)
    logger.debug(f"Catalog built: {len(candidates)} exit node candidates")
    return candidates


def filter_by_country(candidates: Sequence[Candidate], code: str) -> List[Candidate]:
    """Keep candidates whose country code matches ``code``, ignoring case."""
    if not code:
        return list(candidates)
    wanted = code.casefold()
    return [c for c in candidates if c.country_code.casefold() == wanted]


def online_only(candidates: Sequence[Candidate]) -> List[Candidate]:
    return [c for c in candidates if c.online]


def find_candidate(candidates: Sequence[Candidate], name: str) -> Candidate:
    """
    Resolve a user supplied hostname (with or without trailing dot) or stable id.

    Raises:
        CandidateNotFound: when nothing matches
    """
    bare = name.rstrip(".")
    for candidate in candidates:
        if candidate.hostname == bare or candidate.id == name:
            return candidate
    raise CandidateNotFound(name)
