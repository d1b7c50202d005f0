"""API test fixtures — FastAPI app over the in-memory Access store.

Invariants:
    - get_access_client, get_sync_tracker and get_events_lookup are overridden per test
    - The Events System is an httpx.MockTransport serving fests from a dict
    - Every test gets a fresh SyncTaskTracker; tests drain it before reading outcomes

Design Decisions:
    - ASGITransport does not run the lifespan: overridden resources are never disposed by the app
"""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from gate_sync.infrastructure.access_client import get_access_client
from gate_sync.infrastructure.events_lookup import EventsLookup, get_events_lookup
from gate_sync.main import app
from gate_sync.services.sync_tasks import SyncTaskTracker, get_sync_tracker

ORGANISER = {"email": "organiser@uni.edu", "name": "Org"}


@pytest.fixture
def tracker():
    return SyncTaskTracker(history_limit=50)


@pytest.fixture
def events_fests():
    """fest_id → fest JSON served by the mock Events System."""
    return {}


@pytest.fixture
async def events_lookup(events_fests):
    def handler(request: httpx.Request) -> httpx.Response:
        fest_id = request.url.path.rsplit("/", 1)[-1]
        if fest_id not in events_fests:
            return httpx.Response(404, json={"error": "Fest not found"})
        return httpx.Response(200, json={"fest": events_fests[fest_id]})

    lookup = EventsLookup("http://events.test", transport=httpx.MockTransport(handler))
    yield lookup
    await lookup.aclose()


def _override(access, tracker, lookup) -> None:
    app.dependency_overrides[get_access_client] = lambda: access
    app.dependency_overrides[get_sync_tracker] = lambda: tracker
    app.dependency_overrides[get_events_lookup] = lambda: lookup


@pytest.fixture
async def client(access_client, tracker, events_lookup):
    """HTTP client with the Access System integration enabled."""
    _override(access_client, tracker, events_lookup)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    await tracker.drain()
    app.dependency_overrides.clear()


@pytest.fixture
async def disabled_api(disabled_client, tracker, events_lookup):
    """HTTP client with the Access System integration disabled."""
    _override(disabled_client, tracker, events_lookup)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    await tracker.drain()
    app.dependency_overrides.clear()


@pytest.fixture
def event_body():
    """JSON body for POST /sync/events."""
    def _make(**overrides) -> dict:
        event = {
            "event_id": "E1",
            "title": "Robotics Workshop",
            "event_date": "2026-11-03",
            "end_date": "2026-11-04",
            "organizing_dept": "Computer Science",
            "outsider_max_participants": 40,
            "total_participants": 120,
            "allow_outsiders": True,
            "fest": None,
        }
        event.update(overrides)
        return {"event": event, "organiser": ORGANISER}
    return _make


@pytest.fixture
def fest_body():
    def _make(**overrides) -> dict:
        fest = {
            "fest_id": "F1",
            "fest_title": "TechFest",
            "opening_date": "2026-12-01",
            "closing_date": "2026-12-03",
            "organizing_dept": "Engineering",
            "allow_outsiders": "true",
        }
        fest.update(overrides)
        return {"fest": fest, "organiser": ORGANISER}
    return _make
