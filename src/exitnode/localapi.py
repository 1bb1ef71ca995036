"""Async client for the tailscaled LocalAPI."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from . import __version__
from .constants import (
    DEFAULT_SOCKET,
    LOCALAPI_BASE_URL,
    LOCALAPI_PING,
    LOCALAPI_PREFS,
    LOCALAPI_STATUS,
    PING_TYPE_DISCO,
)
from .errors import DaemonError
from .models import PingResult, SessionStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)


class LocalClient:
    """Talks to tailscaled over its unix socket.

    Use as an async context manager so the underlying ``httpx.AsyncClient``
    is closed. ``transport`` replaces the unix socket transport, mainly for
    tests.
    """

    def __init__(
        self,
        socket_path: str = DEFAULT_SOCKET,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        self.socket_path = socket_path
        self._client = httpx.AsyncClient(
            base_url=LOCALAPI_BASE_URL,
            transport=transport or httpx.AsyncHTTPTransport(uds=socket_path),
            timeout=timeout,
            headers={"user-agent": f"exitnode/{__version__}"},
        )

    async def __aenter__(self) -> "LocalClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise DaemonError(f"tailscaled did not answer {path} in time: {e}") from e
        except httpx.TransportError as e:
            raise DaemonError(
                f"cannot reach tailscaled at {self.socket_path}: {e}"
            ) from e

        if response.status_code >= 400:
            raise DaemonError(_error_message(response), status_code=response.status_code)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise DaemonError(f"invalid JSON from tailscaled {path}: {e}") from e

    async def status(self) -> SessionStatus:
        """Current exit node status and the full peer list."""
        data = await self._request("GET", LOCALAPI_STATUS)
        status = SessionStatus.from_dict(data)
        logger.debug(f"Status: backend={status.backend_state} peers={len(status.peers)}")
        return status

    async def status_without_peers(self) -> SessionStatus:
        data = await self._request("GET", LOCALAPI_STATUS, params={"peers": "false"})
        return SessionStatus.from_dict(data)

    async def ping(self, ip: str, ping_type: str = PING_TYPE_DISCO) -> PingResult:
        data = await self._request("POST", LOCALAPI_PING, params={"ip": ip, "type": ping_type})
        return PingResult.from_dict(data)

    async def edit_prefs(self, masked_prefs: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a masked preferences edit; returns the resulting prefs."""
        return await self._request("PATCH", LOCALAPI_PREFS, json=masked_prefs)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    text = response.text.strip()
    return text or f"tailscaled returned HTTP {response.status_code}"
