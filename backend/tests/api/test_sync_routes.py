"""Sync routes — push submission, task outcomes, resolution.

Tests cover:
    - Scenario: first push of an outsider event creates a pending request
    - Scenario: re-push after an edit updates the same request
    - Events under an outsider fest are suppressed; member-only fest events are pushed
    - Fests are pushed only when they admit outsiders
    - Disabled integration answers 202 skipped
    - Failed pushes are observable through the task endpoint
    - Resolution before and after approval, and the inconsistency case
"""

import uuid

from gate_sync.models import SyncRequest


async def _finished_task(client, tracker, task_id: str) -> dict:
    await tracker.drain()
    response = await client.get(f"/api/v1/sync/tasks/{task_id}")
    assert response.status_code == 200
    return response.json()


async def test_push_event_creates_pending_request(client, tracker, event_body, fetch_one):
    response = await client.post("/api/v1/sync/events", json=event_body())

    assert response.status_code == 202
    body = response.json()
    assert body["status"] == "running"
    assert body["correlation_key"] == "E1"

    task = await _finished_task(client, tracker, body["task_id"])
    assert task["status"] == "succeeded"
    stored = await fetch_one(SyncRequest, SyncRequest.correlation_key == "E1")
    assert task["result_id"] == str(stored.id)
    assert stored.status == "pending"
    assert stored.max_capacity == 40


async def test_repush_updates_same_request(client, tracker, event_body, count_rows, fetch_one):
    await client.post("/api/v1/sync/events", json=event_body())
    await tracker.drain()
    await client.post("/api/v1/sync/events", json=event_body(title="Robotics II"))
    await tracker.drain()

    assert await count_rows(SyncRequest) == 1
    stored = await fetch_one(SyncRequest, SyncRequest.correlation_key == "E1")
    assert stored.display_name == "Robotics II"


async def test_member_only_event_is_suppressed(client, event_body, count_rows):
    response = await client.post(
        "/api/v1/sync/events", json=event_body(allow_outsiders="0"),
    )
    assert response.status_code == 202
    assert response.json()["status"] == "skipped"
    assert response.json()["reason"] == "suppressed"
    assert response.json()["task_id"] is None
    assert await count_rows(SyncRequest) == 0


async def test_event_under_outsider_fest_is_suppressed(
    client, events_fests, event_body, count_rows,
):
    events_fests["F1"] = {
        "fest_id": "F1", "fest_title": "TechFest",
        "opening_date": "2026-12-01", "allow_outsiders": True,
    }
    response = await client.post("/api/v1/sync/events", json=event_body(fest="F1"))

    assert response.json()["reason"] == "suppressed"
    assert await count_rows(SyncRequest) == 0


async def test_event_under_member_only_fest_is_pushed(
    client, tracker, events_fests, event_body, count_rows,
):
    events_fests["F1"] = {
        "fest_id": "F1", "fest_title": "TechFest",
        "opening_date": "2026-12-01", "allow_outsiders": False,
    }
    response = await client.post("/api/v1/sync/events", json=event_body(fest="F1"))
    task = await _finished_task(client, tracker, response.json()["task_id"])

    assert task["status"] == "succeeded"
    assert await count_rows(SyncRequest) == 1


async def test_event_with_unknown_fest_is_pushed(client, tracker, event_body, count_rows):
    response = await client.post("/api/v1/sync/events", json=event_body(fest="F-gone"))
    await tracker.drain()
    assert response.json()["status"] == "running"
    assert await count_rows(SyncRequest) == 1


async def test_push_fest_creates_aggregate_request(client, tracker, fest_body, fetch_one):
    response = await client.post("/api/v1/sync/fests", json=fest_body())
    task = await _finished_task(client, tracker, response.json()["task_id"])

    assert task["status"] == "succeeded"
    stored = await fetch_one(SyncRequest, SyncRequest.correlation_key == "F1")
    assert stored.display_name == "[FEST] TechFest"
    assert stored.max_capacity == 1000


async def test_member_only_fest_is_not_pushed(client, fest_body, count_rows):
    response = await client.post("/api/v1/sync/fests", json=fest_body(allow_outsiders=0))
    assert response.json()["status"] == "skipped"
    assert response.json()["reason"] == "outsiders_not_allowed"
    assert await count_rows(SyncRequest) == 0


async def test_disabled_integration_skips_pushes(disabled_api, event_body, fest_body):
    for path, body in (
        ("/api/v1/sync/events", event_body()),
        ("/api/v1/sync/fests", fest_body()),
    ):
        response = await disabled_api.post(path, json=body)
        assert response.status_code == 202
        assert response.json()["status"] == "skipped"
        assert response.json()["reason"] == "integration_disabled"


async def test_failed_push_is_observable(client, tracker, event_body):
    response = await client.post(
        "/api/v1/sync/events",
        json={"event": event_body()["event"], "organiser": {"email": "not-an-email"}},
    )
    assert response.status_code == 202

    task = await _finished_task(client, tracker, response.json()["task_id"])
    assert task["status"] == "failed"
    assert task["error_code"] == "VALIDATION_ERROR"


async def test_invalid_push_body_rejected(client):
    response = await client.post(
        "/api/v1/sync/events",
        json={"event": {"event_id": "E1"}, "organiser": {"email": "org@uni.edu"}},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_task_returns_404(client):
    response = await client.get(f"/api/v1/sync/tasks/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"]["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_resolution_before_and_after_approval(client, tracker, event_body, approve):
    await client.post("/api/v1/sync/events", json=event_body())
    await tracker.drain()

    pending = (await client.get("/api/v1/sync/E1/resolution")).json()
    assert pending["approved"] is False
    assert pending["entity"] is None
    assert pending["integration"] == "enabled"

    approved = await approve("E1")
    resolved = (await client.get("/api/v1/sync/E1/resolution")).json()
    assert resolved["approved"] is True
    assert resolved["entity"]["id"] == str(approved.id)
    assert resolved["entity"]["max_capacity"] == 40


async def test_resolution_inconsistency_is_409(client, tracker, event_body, approve):
    await client.post("/api/v1/sync/events", json=event_body())
    await tracker.drain()
    await approve("E1", with_entity=False)

    response = await client.get("/api/v1/sync/E1/resolution")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INTEGRATION_INCONSISTENCY"


async def test_resolution_when_disabled(disabled_api):
    body = (await disabled_api.get("/api/v1/sync/E1/resolution")).json()
    assert body == {
        "correlation_key": "E1", "integration": "disabled",
        "approved": False, "entity": None,
    }


async def test_float_one_flag_is_pushed(client, tracker, event_body, count_rows):
    response = await client.post(
        "/api/v1/sync/events", json=event_body(allow_outsiders=1.0),
    )
    await tracker.drain()

    assert response.json()["status"] == "running"
    assert await count_rows(SyncRequest) == 1
