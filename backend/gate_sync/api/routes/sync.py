"""Sync Routes — the Events System write path's entry into Access System synchronization.

Invariants:
    - Push routes never fail because of the Access System: they answer 202 and run
      the push in the background (SyncTaskTracker records the outcome)
    - Events are checked by should_push before anything is submitted
    - Fests are pushed only when they admit outsiders
    - Resolution is read-only; an inconsistency surfaces as 409 via the global handler

Design Decisions:
    - Skipped pushes still answer 202 with status=skipped and a reason: the write path
      handles one response shape
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from gate_sync.core.domain_types import TaskStatus
from gate_sync.core.errors import ResourceNotFoundError
from gate_sync.core.parse_flags import parse_flag
from gate_sync.infrastructure.access_client import AccessClient, get_access_client
from gate_sync.infrastructure.events_lookup import EventsLookup, get_events_lookup
from gate_sync.schemas.sync import (
    ApprovedEntityResponse, EventPushRequest, FestPushRequest,
    ResolutionResponse, SyncTaskResponse,
)
from gate_sync.services.resolution_resolver import ResolutionResolver
from gate_sync.services.suppression_policy import should_push
from gate_sync.services.sync_gateway import SyncGateway
from gate_sync.services.sync_tasks import (
    SyncTaskRecord, SyncTaskTracker, get_sync_tracker,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


def _task_response(record: SyncTaskRecord) -> SyncTaskResponse:
    return SyncTaskResponse(
        task_id=record.id,
        name=record.name,
        correlation_key=record.correlation_key,
        status=record.status,
        result_id=record.result_id,
        error_code=record.error_code,
        error_message=record.error_message,
        submitted_at=record.submitted_at,
        finished_at=record.finished_at,
    )


def _skipped(name: str, correlation_key: str, reason: str) -> SyncTaskResponse:
    logger.info(
        f"{name} for '{correlation_key}' skipped: {reason}",
        extra={"correlation_key": correlation_key},
    )
    return SyncTaskResponse(
        name=name, correlation_key=correlation_key,
        status=TaskStatus.SKIPPED, reason=reason,
    )


@router.post(
    "/events", response_model=SyncTaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def push_event(
    body: EventPushRequest,
    client: AccessClient = Depends(get_access_client),
    tracker: SyncTaskTracker = Depends(get_sync_tracker),
    lookup: EventsLookup = Depends(get_events_lookup),
):
    """Submit an event push if the event warrants its own sync request."""
    event = body.event
    if not client.enabled:
        return _skipped("push_event", event.event_id, "integration_disabled")
    if not await should_push(event, lookup.get_fest):
        return _skipped("push_event", event.event_id, "suppressed")

    gateway = SyncGateway(client)
    record = tracker.submit(
        "push_event", event.event_id,
        lambda: gateway.push_event(event, body.organiser.email, body.organiser.name),
    )
    return _task_response(record)


@router.post(
    "/fests", response_model=SyncTaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def push_fest(
    body: FestPushRequest,
    client: AccessClient = Depends(get_access_client),
    tracker: SyncTaskTracker = Depends(get_sync_tracker),
):
    """Submit a fest push covering all of its child events."""
    fest = body.fest
    if not client.enabled:
        return _skipped("push_fest", fest.fest_id, "integration_disabled")
    if not parse_flag(fest.allow_outsiders):
        return _skipped("push_fest", fest.fest_id, "outsiders_not_allowed")

    gateway = SyncGateway(client)
    record = tracker.submit(
        "push_fest", fest.fest_id,
        lambda: gateway.push_fest(fest, body.organiser.email, body.organiser.name),
    )
    return _task_response(record)


@router.get("/tasks/{task_id}", response_model=SyncTaskResponse)
async def get_task(
    task_id: UUID, tracker: SyncTaskTracker = Depends(get_sync_tracker),
):
    """Outcome of a previously submitted push."""
    record = tracker.get(task_id)
    if record is None:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail=ResourceNotFoundError("Sync task", str(task_id)).to_response(),
        )
    return _task_response(record)


@router.get("/{correlation_key}/resolution", response_model=ResolutionResponse)
async def get_resolution(
    correlation_key: str, client: AccessClient = Depends(get_access_client),
):
    """Whether the pushed event/fest has been approved in the Access System."""
    entity = await ResolutionResolver(client).resolve(correlation_key)
    return ResolutionResponse(
        correlation_key=correlation_key,
        integration=client.mode.value,
        approved=entity is not None,
        entity=(
            ApprovedEntityResponse(
                id=entity.id, name=entity.name, date_from=entity.date_from,
                date_to=entity.date_to, max_capacity=entity.max_capacity,
            )
            if entity is not None else None
        ),
    )
