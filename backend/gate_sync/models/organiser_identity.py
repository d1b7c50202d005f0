"""OrganiserIdentity ORM — the Access System account standing in for an Events-System organiser.

Invariants:
    - Lives in the Access System's users table; email maps to the UNIQUE
      username column, so there is at most one identity per organiser email
    - secret is generated once and never returned by any operation
    - Rows are created once, never updated or deleted by this service
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from gate_sync.db.base import Base


class OrganiserIdentity(Base):
    """Organiser account — FK target for sync requests."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        "username", String(320), nullable=False, unique=True,
    )
    secret: Mapped[str] = mapped_column("password", String(128), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="organiser",
    )
    display_name: Mapped[str] = mapped_column("full_name", String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
