"""Tests for the tailscaled LocalAPI client, served by respx routes."""

import json

import httpx
import pytest
import respx

from exitnode.errors import DaemonError
from exitnode.localapi import LocalClient

BASE = "http://local-tailscaled.sock"


@pytest.fixture
def router():
    return respx.Router(assert_all_called=False)


@pytest.fixture
def client(router):
    return LocalClient(socket_path="/tmp/test.sock", transport=httpx.MockTransport(router.handler))


@pytest.mark.asyncio
async def test_status_parses_peers(router, client, status_payload):
    router.get(f"{BASE}/localapi/v0/status").mock(
        return_value=httpx.Response(200, json=status_payload)
    )
    async with client:
        status = await client.status()

    assert status.backend_state == "Running"
    assert status.exit_node is None
    assert len(status.peers) == 7
    assert status.exit_node_active is False


@pytest.mark.asyncio
async def test_status_without_peers_sends_query(router, client):
    route = router.get(f"{BASE}/localapi/v0/status").mock(
        return_value=httpx.Response(
            200,
            json={"ExitNodeStatus": {"ID": "nUS1", "Online": True, "TailscaleIPs": ["100.64.0.1/32"]}},
        )
    )
    async with client:
        status = await client.status_without_peers()

    assert route.calls.last.request.url.params["peers"] == "false"
    assert status.exit_node_active is True
    assert status.exit_node.id == "nUS1"


@pytest.mark.asyncio
async def test_ping_sends_ip_and_type(router, client):
    route = router.post(f"{BASE}/localapi/v0/ping").mock(
        return_value=httpx.Response(200, json={"IP": "100.64.0.1", "LatencySeconds": 0.042})
    )
    async with client:
        result = await client.ping("100.64.0.1")

    params = route.calls.last.request.url.params
    assert params["ip"] == "100.64.0.1"
    assert params["type"] == "disco"
    assert result.latency_seconds == pytest.approx(0.042)
    assert result.err == ""


@pytest.mark.asyncio
async def test_edit_prefs_patches_masked_prefs(router, client):
    route = router.patch(f"{BASE}/localapi/v0/prefs").mock(
        return_value=httpx.Response(200, json={"ExitNodeID": "nCH1"})
    )
    async with client:
        prefs = await client.edit_prefs({"ExitNodeID": "nCH1", "ExitNodeIDSet": True})

    body = json.loads(route.calls.last.request.content)
    assert body == {"ExitNodeID": "nCH1", "ExitNodeIDSet": True}
    assert prefs["ExitNodeID"] == "nCH1"


@pytest.mark.asyncio
async def test_error_response_raises_daemon_error(router, client):
    router.patch(f"{BASE}/localapi/v0/prefs").mock(
        return_value=httpx.Response(403, json={"error": "prefs write access denied"})
    )
    async with client:
        with pytest.raises(DaemonError) as excinfo:
            await client.edit_prefs({"ExitNodeID": "", "ExitNodeIDSet": True})

    assert excinfo.value.status_code == 403
    assert "prefs write access denied" in str(excinfo.value)


@pytest.mark.asyncio
async def test_plain_text_error_body(router, client):
    router.get(f"{BASE}/localapi/v0/status").mock(
        return_value=httpx.Response(500, text="internal failure")
    )
    async with client:
        with pytest.raises(DaemonError, match="internal failure"):
            await client.status()


@pytest.mark.asyncio
async def test_connection_failure_raises_daemon_error(router, client):
    router.get(f"{BASE}/localapi/v0/status").mock(side_effect=httpx.ConnectError("refused"))
    async with client:
        with pytest.raises(DaemonError, match="cannot reach tailscaled"):
            await client.status()


@pytest.mark.asyncio
async def test_invalid_json_raises_daemon_error(router, client):
    router.get(f"{BASE}/localapi/v0/status").mock(
        return_value=httpx.Response(200, text="not json")
    )
    async with client:
        with pytest.raises(DaemonError, match="invalid JSON"):
            await client.status()
