"""ApprovedEntity ORM — the Access System event created when a human approves a sync request.

Invariants:
    - 1:1 with an approved SyncRequest (events.event_request_id UNIQUE FK)
    - Read-only from this service's perspective; written by the Access System workflow
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Integer, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from gate_sync.db.base import Base


class ApprovedEntity(Base):
    """Approved Access System event — the FK target for visitor credentials."""
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    sync_request_id: Mapped[uuid.UUID] = mapped_column(
        "event_request_id", UUID(as_uuid=True), ForeignKey("event_requests.id"),
        nullable=False, unique=True,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    date_from: Mapped[date] = mapped_column(Date, nullable=False)
    date_to: Mapped[date] = mapped_column(Date, nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    sync_request: Mapped["SyncRequest"] = relationship(
        "SyncRequest", back_populates="approved_entity",
    )
