"""
Unit tests for :func:`loadgen.executor.execute` – outcome classification.

The network is replaced by ``httpx.MockTransport``; published entries are
collected in a list instead of a metrics store.
"""

import asyncio

import httpx
import pytest
from freezegun import freeze_time

from loadgen.config import LoadConfig, Variant
from loadgen.executor import NETWORK_ERROR, _round_ms, execute, new_pending_entry
from loadgen.model import Status

GET = LoadConfig.for_variant(Variant.DASHBOARD, target_url="http://sample.test/sample")
POST = LoadConfig.for_variant(Variant.SIMPLE, target_url="http://sample.test/sample")


def _fire(handler, config=GET):
    published = []

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await execute(client, config, published.append)

    settled = asyncio.run(go())
    return settled, published


def test_pending_published_before_settlement():
    """Exactly two messages per request: pending first, then the settled copy."""
    settled, published = _fire(lambda req: httpx.Response(200))
    assert [e.status for e in published] == [Status.PENDING, Status.SUCCESS]
    assert published[0].id == published[1].id == settled.id


def test_get_success():
    settled, _ = _fire(lambda req: httpx.Response(204))
    assert settled.status is Status.SUCCESS
    assert settled.status_code == 204
    assert settled.message == "204 No Content"
    assert settled.latency_ms is not None and settled.latency_ms >= 0


def test_http_500_is_error():
    """A non-2xx response is a logical error even though nothing raised."""
    settled, _ = _fire(lambda req: httpx.Response(500))
    assert settled.status is Status.ERROR
    assert settled.status_code == 500
    assert settled.message == "Status: 500 Internal Server Error"


def test_network_exception_is_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    settled, _ = _fire(refuse)
    assert settled.status is Status.ERROR
    assert settled.status_code is None
    assert settled.message == "connection refused"


def test_empty_exception_message_falls_back():
    def boom(request):
        raise RuntimeError()

    settled, _ = _fire(boom)
    assert settled.status is Status.ERROR
    assert settled.message == NETWORK_ERROR


def test_post_sends_json_message_and_reads_id():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["ctype"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(201, json={"id": 42})

    settled, _ = _fire(handler, POST)
    assert seen["method"] == "POST"
    assert seen["ctype"] == "application/json"
    assert b"Request from loadgen at" in seen["body"]
    assert settled.message == "ID: 42 - Created successfully"


def test_post_malformed_body_is_error():
    """A 2xx whose body cannot be parsed settles as an error, keeping code and latency."""
    ticks = iter([5.0, 5.012])

    async def go():
        transport = httpx.MockTransport(lambda r: httpx.Response(201, text="<html>"))
        async with httpx.AsyncClient(transport=transport) as c:
            return await execute(c, POST, lambda e: None, clock=lambda: next(ticks))

    settled = asyncio.run(go())
    assert settled.status is Status.ERROR
    assert settled.status_code == 201
    assert settled.latency_ms == 12
    assert settled.message and settled.message != NETWORK_ERROR


def test_post_body_without_id_is_error():
    settled, _ = _fire(lambda req: httpx.Response(201, json={"ok": True}), POST)
    assert settled.status is Status.ERROR
    assert settled.status_code == 201


@pytest.mark.parametrize("ms, expected", [(2.5, 3), (3.5, 4), (0.5, 1), (2.49, 2), (0.0, 0)])
def test_round_ms_halves_up(ms, expected):
    assert _round_ms(ms) == expected


def test_latency_uses_injected_clock():
    """Latency is rounded to the nearest millisecond of the monotonic clock."""
    ticks = iter([10.0, 10.0874])

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as c:
            return await execute(c, GET, lambda e: None, clock=lambda: next(ticks))

    assert asyncio.run(go()).latency_ms == 87


@freeze_time("2024-03-01 12:34:56")
def test_pending_entry_timestamps():
    entry = new_pending_entry()
    assert entry.timestamp == "12:34:56"
    assert entry.started_at_epoch_ms == 1709296496000
    assert entry.status is Status.PENDING
