"""SyncRequest ORM — a pushed event or fest awaiting human approval in the Access System.

Invariants:
    - Lives in the Access System's event_requests table; correlation_key maps to the
      UNIQUE source_ref column, one row per Events-System event/fest id
    - status is one of: pending, approved, rejected (SyncStatus)
    - This service inserts rows as pending and refreshes mutable fields;
      status transitions are made by the Access System only
    - updated_at is None until the first refresh

Design Decisions:
    - Uniqueness enforced by the table, not by check-then-insert: concurrent first pushes
      resolve through the constraint
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Integer, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from gate_sync.core.domain_types import SyncStatus
from gate_sync.db.base import Base


class SyncRequest(Base):
    """Pending representation of an event or fest."""
    __tablename__ = "event_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    correlation_key: Mapped[str] = mapped_column(
        "source_ref", String(200), nullable=False, unique=True,
    )
    organiser_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"),
        nullable=False,
    )
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    display_name: Mapped[str] = mapped_column("event_name", String(300), nullable=False)
    description: Mapped[str | None] = mapped_column("event_description", Text, nullable=True)
    date_from: Mapped[date] = mapped_column(Date, nullable=False)
    date_to: Mapped[date] = mapped_column(Date, nullable=False)
    expected_participants: Mapped[int] = mapped_column(
        "expected_students", Integer, nullable=False,
    )
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(
        String(20), nullable=False, default="events",
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SyncStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Relationships
    approved_entity: Mapped["ApprovedEntity | None"] = relationship(
        "ApprovedEntity", back_populates="sync_request", uselist=False,
    )
