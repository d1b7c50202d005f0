"""Sync Schemas — push requests, background task records, and resolution responses."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from gate_sync.core.domain_types import TaskStatus
from gate_sync.schemas.records import EventRecord, FestRecord


class OrganiserRef(BaseModel):
    """Organiser the pushed entity is attributed to."""
    email: str = Field(min_length=3, max_length=320)
    name: str | None = Field(None, max_length=200)


class EventPushRequest(BaseModel):
    event: EventRecord
    organiser: OrganiserRef


class FestPushRequest(BaseModel):
    fest: FestRecord
    organiser: OrganiserRef


class SyncTaskResponse(BaseModel):
    """Outcome record of a background push."""
    task_id: UUID | None = None
    name: str
    correlation_key: str
    status: TaskStatus
    reason: str | None = None
    result_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    submitted_at: datetime | None = None
    finished_at: datetime | None = None


class ApprovedEntityResponse(BaseModel):
    id: UUID
    name: str
    date_from: date
    date_to: date
    max_capacity: int


class ResolutionResponse(BaseModel):
    """Whether a pushed event/fest has an approved Access System entity."""
    correlation_key: str
    integration: str
    approved: bool
    entity: ApprovedEntityResponse | None = None
