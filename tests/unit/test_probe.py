import asyncio

import pytest

from exitnode.constants import UNMEASURED
from exitnode.errors import DaemonError
from exitnode.models import PingResult
from exitnode.probe import LocalAPIProber


class StubClient:
    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def ping(self, ip, ping_type="disco"):
        self.calls.append((ip, ping_type))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.asyncio
async def test_probe_returns_milliseconds(make_candidate):
    client = StubClient(PingResult(ip="100.64.0.1", latency_seconds=0.0421))
    prober = LocalAPIProber(client)

    latency = await prober.probe(make_candidate("US1", addresses=["100.64.0.1", "fd7a::1"]))

    assert latency == pytest.approx(42.1)
    assert client.calls == [("100.64.0.1", "disco")]


@pytest.mark.asyncio
async def test_probe_without_address_is_unmeasured(make_candidate):
    client = StubClient(PingResult(latency_seconds=0.01))
    prober = LocalAPIProber(client)

    assert await prober.probe(make_candidate("US1", addresses=[])) == UNMEASURED
    assert client.calls == []


@pytest.mark.asyncio
async def test_probe_ping_error_is_unmeasured(make_candidate):
    prober = LocalAPIProber(StubClient(PingResult(err="timeout waiting for pong")))
    assert await prober.probe(make_candidate("US1")) == UNMEASURED


@pytest.mark.asyncio
async def test_probe_daemon_error_is_unmeasured(make_candidate):
    prober = LocalAPIProber(StubClient(error=DaemonError("no route", status_code=500)))
    assert await prober.probe(make_candidate("US1")) == UNMEASURED


@pytest.mark.asyncio
async def test_probe_timeout_is_unmeasured(make_candidate):
    client = StubClient(PingResult(latency_seconds=0.01), delay=1.0)
    prober = LocalAPIProber(client, timeout=0.01)
    assert await prober.probe(make_candidate("US1")) == UNMEASURED


@pytest.mark.asyncio
async def test_probe_is_repeatable(make_candidate):
    client = StubClient(PingResult(latency_seconds=0.02))
    prober = LocalAPIProber(client)
    candidate = make_candidate("US1")

    first = await prober.probe(candidate)
    second = await prober.probe(candidate)

    assert first == second == pytest.approx(20.0)
    assert candidate.latency_ms == UNMEASURED
