import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from exitnode.constants import UNMEASURED  # noqa: E402
from exitnode.errors import DaemonError  # noqa: E402
from exitnode.models import Candidate, PingResult, SessionStatus  # noqa: E402


def _peer(
    node_id: str,
    dns_name: str,
    *,
    online: bool = True,
    exit_node_option: bool = True,
    ips: Optional[List[str]] = None,
    location: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    peer: Dict[str, Any] = {
        "ID": node_id,
        "DNSName": dns_name,
        "Online": online,
        "ExitNodeOption": exit_node_option,
        "TailscaleIPs": ips if ips is not None else [],
    }
    if location is not None:
        peer["Location"] = location
    return peer


def _location(country: str, code: str, city: str, city_code: str, priority: int) -> Dict[str, Any]:
    return {
        "Country": country,
        "CountryCode": code,
        "City": city,
        "CityCode": city_code,
        "Priority": priority,
    }


@pytest.fixture
def status_payload() -> Dict[str, Any]:
    """A LocalAPI status document with Mullvad and ordinary peers."""
    usa = ("USA", "US", "New York City", "nyc")
    swiss = ("Switzerland", "CH", "Zurich", "zrh")
    sweden = ("Sweden", "SE", "Stockholm", "sto")
    return {
        "BackendState": "Running",
        "ExitNodeStatus": None,
        "Peer": {
            "nodekey:01": _peer(
                "nUS1", "us-nyc-wg-301.mullvad.ts.net.",
                ips=["100.64.0.1"], location=_location(*usa, 100),
            ),
            "nodekey:02": _peer(
                "nUS2", "us-nyc-wg-302.mullvad.ts.net.",
                ips=["100.64.0.2"], location=_location(*usa, 100),
            ),
            "nodekey:03": _peer(
                "nCH1", "ch-zrh-wg-001.mullvad.ts.net.",
                ips=["100.64.1.1"], location=_location(*swiss, 90),
            ),
            "nodekey:04": _peer(
                "nSE1", "se-sto-wg-001.mullvad.ts.net.", online=False,
                ips=["100.64.2.1"], location=_location(*sweden, 10),
            ),
            "nodekey:05": _peer(
                "nXX1", "xx-unk-wg-001.mullvad.ts.net.", online=False, ips=["100.64.3.1"],
            ),
            "nodekey:06": _peer(
                "nHOME", "home-router.example.ts.net.", ips=["100.64.9.9"],
            ),
            "nodekey:07": _peer(
                "nNOEXIT", "us-nyc-wg-999.mullvad.ts.net.", exit_node_option=False,
                ips=["100.64.0.9"], location=_location(*usa, 1),
            ),
        },
    }


@pytest.fixture
def make_candidate() -> Callable[..., Candidate]:
    """Factory for candidates with sensible defaults."""

    def factory(
        node_id: str,
        country_code: str = "US",
        priority: int = 100,
        online: bool = True,
        dns_name: Optional[str] = None,
        latency_ms: float = UNMEASURED,
        addresses: Optional[List[str]] = None,
    ) -> Candidate:
        return Candidate(
            id=node_id,
            dns_name=dns_name or f"{node_id.lower()}.mullvad.ts.net.",
            country=country_code,
            country_code=country_code,
            city=f"{country_code} City",
            city_code=country_code.lower(),
            priority=priority,
            online=online,
            addresses=addresses if addresses is not None else ["100.64.0.1"],
            latency_ms=latency_ms,
        )

    return factory


class FakeProber:
    """Returns canned latencies by candidate id; unknown ids fail."""

    def __init__(
        self,
        latencies: Dict[str, float],
        on_probe: Optional[Callable[[Candidate], None]] = None,
    ) -> None:
        self.latencies = latencies
        self.on_probe = on_probe
        self.calls: List[str] = []

    async def probe(self, candidate: Candidate) -> float:
        self.calls.append(candidate.id)
        if self.on_probe is not None:
            self.on_probe(candidate)
        return self.latencies.get(candidate.id, UNMEASURED)


@pytest.fixture
def fake_prober() -> Callable[..., FakeProber]:
    return FakeProber


class FakeLocalClient:
    """In-memory stand-in for :class:`exitnode.localapi.LocalClient`."""

    def __init__(
        self,
        payload: Dict[str, Any],
        ping_latencies: Optional[Dict[str, float]] = None,
        prefs_error: Optional[DaemonError] = None,
    ) -> None:
        self.payload = payload
        self.ping_latencies = ping_latencies or {}
        self.prefs_error = prefs_error
        self.prefs_edits: List[Dict[str, Any]] = []
        self.pings: List[str] = []

    async def __aenter__(self) -> "FakeLocalClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def status(self) -> SessionStatus:
        return SessionStatus.from_dict(self.payload)

    async def status_without_peers(self) -> SessionStatus:
        return SessionStatus.from_dict({**self.payload, "Peer": {}})

    async def ping(self, ip: str, ping_type: str = "disco") -> PingResult:
        self.pings.append(ip)
        seconds = self.ping_latencies.get(ip)
        if seconds is None:
            return PingResult(ip=ip, err="no reply")
        return PingResult(ip=ip, latency_seconds=seconds)

    async def edit_prefs(self, masked_prefs: Dict[str, Any]) -> Dict[str, Any]:
        if self.prefs_error is not None:
            raise self.prefs_error
        self.prefs_edits.append(masked_prefs)
        return {"ExitNodeID": masked_prefs["ExitNodeID"]}


@pytest.fixture
def fake_client(status_payload) -> FakeLocalClient:
    return FakeLocalClient(status_payload)
