import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from .constants import PING_TYPE_DISCO, PROBE_TIMEOUT, UNMEASURED
from .errors import DaemonError
from .models import Candidate

if TYPE_CHECKING:
    from .localapi import LocalClient

logger = logging.getLogger(__name__)


class Prober(Protocol):
    async def probe(self, candidate: Candidate) -> float:
        """Return round-trip latency in milliseconds, or ``UNMEASURED``."""
        ...


class LocalAPIProber:
    """Measures latency with a disco ping sent through tailscaled.

    Any failure (no address, timeout, daemon error, ping error) is reported as
    ``UNMEASURED``; nothing is raised.
    """

    def __init__(
        self,
        client: "LocalClient",
        timeout: float = PROBE_TIMEOUT,
        ping_type: str = PING_TYPE_DISCO,
    ) -> None:
        self.client = client
        self.timeout = timeout
        self.ping_type = ping_type

    async def probe(self, candidate: Candidate) -> float:
        if not candidate.addresses:
            logger.debug(f"  {candidate.hostname}: no address to ping")
            return UNMEASURED

        target = candidate.addresses[0]
        try:
            result = await asyncio.wait_for(
                self.client.ping(target, self.ping_type), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.debug(f"  Ping to {candidate.hostname} timed out after {self.timeout}s")
            return UNMEASURED
        except DaemonError as e:
            logger.debug(f"  Ping to {candidate.hostname} failed: {e}")
            return UNMEASURED

        if result.err:
            logger.debug(f"  Ping to {candidate.hostname} error: {result.err}")
            return UNMEASURED

        latency_ms = round(result.latency_seconds * 1000, 2)
        if latency_ms <= 0:
            return UNMEASURED
        logger.debug(f"  Ping to {candidate.hostname}: {latency_ms:.0f}ms")
        return latency_ms
