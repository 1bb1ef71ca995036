from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import UNMEASURED


@dataclass(slots=True)
class Candidate:
    """A selectable exit node with its location and test results.

    ``latency_ms`` uses the ``UNMEASURED`` sentinel both for nodes that were
    never probed and for nodes whose probe failed.
    """

    id: str
    dns_name: str
    country: str = ""
    country_code: str = ""
    city: str = ""
    city_code: str = ""
    priority: int = 0
    online: bool = False
    addresses: List[str] = field(default_factory=list)
    latency_ms: float = UNMEASURED

    @property
    def hostname(self) -> str:
        """Routing name without the trailing dot."""

        return self.dns_name.rstrip(".")

    @property
    def location(self) -> str:
        return f"{self.city}, {self.country_code}"

    @property
    def measured(self) -> bool:
        return self.latency_ms != UNMEASURED


@dataclass(slots=True)
class RegionGroup:
    """Candidates sharing a country code, in canonical order."""

    country_code: str
    country: str = ""
    candidates: List[Candidate] = field(default_factory=list)
    best_latency_ms: float = UNMEASURED

    @property
    def representative(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def measured(self) -> bool:
        return self.best_latency_ms != UNMEASURED


@dataclass(slots=True)
class PeerLocation:
    country: str = ""
    country_code: str = ""
    city: str = ""
    city_code: str = ""
    priority: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeerLocation":
        return cls(
            country=data.get("Country") or "",
            country_code=data.get("CountryCode") or "",
            city=data.get("City") or "",
            city_code=data.get("CityCode") or "",
            priority=int(data.get("Priority") or 0),
        )


@dataclass(slots=True)
class PeerStatus:
    """One peer as reported by the daemon's status endpoint."""

    id: str
    dns_name: str = ""
    online: bool = False
    exit_node_option: bool = False
    addresses: List[str] = field(default_factory=list)
    location: Optional[PeerLocation] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PeerStatus":
        location = data.get("Location")
        return cls(
            id=data.get("ID") or "",
            dns_name=data.get("DNSName") or "",
            online=bool(data.get("Online")),
            exit_node_option=bool(data.get("ExitNodeOption")),
            addresses=list(data.get("TailscaleIPs") or []),
            location=PeerLocation.from_dict(location) if location else None,
        )


@dataclass(slots=True)
class ExitNodeStatus:
    id: str
    online: bool = False
    addresses: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExitNodeStatus":
        return cls(
            id=data.get("ID") or "",
            online=bool(data.get("Online")),
            addresses=list(data.get("TailscaleIPs") or []),
        )


@dataclass(slots=True)
class SessionStatus:
    """Snapshot of the daemon state: current exit node and known peers."""

    backend_state: str = ""
    exit_node: Optional[ExitNodeStatus] = None
    peers: List[PeerStatus] = field(default_factory=list)

    @property
    def exit_node_active(self) -> bool:
        return self.exit_node is not None and self.exit_node.online

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionStatus":
        exit_node = data.get("ExitNodeStatus")
        peer_map = data.get("Peer") or {}
        return cls(
            backend_state=data.get("BackendState") or "",
            exit_node=ExitNodeStatus.from_dict(exit_node) if exit_node else None,
            peers=[PeerStatus.from_dict(peer) for peer in peer_map.values()],
        )


@dataclass(slots=True)
class PingResult:
    ip: str = ""
    err: str = ""
    latency_seconds: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PingResult":
        return cls(
            ip=data.get("IP") or "",
            err=data.get("Err") or "",
            latency_seconds=float(data.get("LatencySeconds") or 0.0),
        )
