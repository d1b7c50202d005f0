"""Events Lookup — fest reads over HTTP.

Tests cover:
    - Found fest parsed into FestRecord
    - 404 → None
    - 5xx, transport failures, timeouts, malformed payloads → UpstreamError
"""

import json

import httpx
import pytest

from gate_sync.core.errors import UpstreamError
from gate_sync.infrastructure.events_lookup import EventsLookup

FEST = {
    "fest_id": "F1",
    "fest_title": "TechFest",
    "opening_date": "2026-12-01",
    "closing_date": "2026-12-03",
    "organizing_dept": "Engineering",
    "allow_outsiders": "true",
    "sub_heads": [],
}


def _lookup(handler) -> EventsLookup:
    return EventsLookup("http://events.test/", transport=httpx.MockTransport(handler))


async def test_found_fest_is_parsed():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"fest": FEST})

    lookup = _lookup(handler)
    fest = await lookup.get_fest("F1")
    await lookup.aclose()

    assert seen == ["/api/fests/F1"]
    assert fest.fest_title == "TechFest"
    assert fest.allow_outsiders == "true"


async def test_fest_id_is_path_escaped():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path.decode())
        return httpx.Response(404)

    lookup = _lookup(handler)
    await lookup.get_fest("a/b c")
    await lookup.aclose()
    assert seen == ["/api/fests/a%2Fb%20c"]


async def test_missing_fest_returns_none():
    lookup = _lookup(lambda request: httpx.Response(404, json={"error": "Fest not found"}))
    assert await lookup.get_fest("F-gone") is None
    await lookup.aclose()


async def test_server_error_raises_upstream():
    lookup = _lookup(lambda request: httpx.Response(500))
    with pytest.raises(UpstreamError) as exc_info:
        await lookup.get_fest("F1")
    await lookup.aclose()
    assert exc_info.value.context.correlation_key == "F1"


async def test_connection_failure_raises_upstream():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    lookup = _lookup(handler)
    with pytest.raises(UpstreamError):
        await lookup.get_fest("F1")
    await lookup.aclose()


async def test_timeout_raises_upstream():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    lookup = _lookup(handler)
    with pytest.raises(UpstreamError) as exc_info:
        await lookup.get_fest("F1")
    await lookup.aclose()
    assert "timed out" in exc_info.value.message


@pytest.mark.parametrize(
    "body",
    [b"not json", json.dumps({"fest": {"fest_id": "F1"}}).encode(), b"[1, 2]"],
)
async def test_malformed_payload_raises_upstream(body):
    lookup = _lookup(lambda request: httpx.Response(200, content=body))
    with pytest.raises(UpstreamError):
        await lookup.get_fest("F1")
    await lookup.aclose()


async def test_empty_fest_payload_returns_none():
    lookup = _lookup(lambda request: httpx.Response(200, json={"fest": None}))
    assert await lookup.get_fest("F1") is None
    await lookup.aclose()
