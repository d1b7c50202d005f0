"""VisitorCredential ORM — a gate-entry pass for one non-member attendee.

Invariants:
    - Lives in the Access System's visitors table; event_id references events.id
    - status is "approved" at creation; no revoke/update path exists
    - valid_to >= valid_from (checked by the provisioner before insert)
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from gate_sync.core.domain_types import CredentialStatus
from gate_sync.db.base import Base


class VisitorCredential(Base):
    """Visitor pass — its id is what the verification reference encodes."""
    __tablename__ = "visitors"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    approved_entity_id: Mapped[uuid.UUID] = mapped_column(
        "event_id", UUID(as_uuid=True), ForeignKey("events.id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    register_number: Mapped[str | None] = mapped_column(
        String(64), nullable=True,
    )
    event_name: Mapped[str] = mapped_column(String(300), nullable=False)
    valid_from: Mapped[date] = mapped_column("date_of_visit_from", Date, nullable=False)
    valid_to: Mapped[date] = mapped_column("date_of_visit_to", Date, nullable=False)
    visitor_category: Mapped[str] = mapped_column(
        String(20), nullable=False, default="student",
    )
    purpose: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CredentialStatus.APPROVED.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
