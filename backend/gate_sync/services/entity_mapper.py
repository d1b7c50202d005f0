"""Entity Mapper — maps an Events-System organiser email to a stable Access System identity.

Invariants:
    - email (stripped, lowercased) is the natural key; one identity per email
    - An existing identity is returned unchanged (never updated)
    - A new identity gets a fresh 32-byte secret that no caller ever sees
    - display_name defaults to the local part as the caller wrote it (case kept);
      department to "Events Platform"
    - Losing a concurrent first insert re-reads and returns the winner's id

Design Decisions:
    - The UNIQUE(email) constraint arbitrates races; check-then-insert is only the fast path
"""

import logging
import secrets

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gate_sync.core.domain_types import IdentityId
from gate_sync.core.errors import (
    ErrorContext, UniqueConflictError, UpstreamError, ValidationError,
)
from gate_sync.infrastructure.access_client import AccessClient, require_enabled
from gate_sync.models.organiser_identity import OrganiserIdentity

logger = logging.getLogger(__name__)

DEFAULT_ORGANISER_DEPARTMENT = "Events Platform"
ORGANISER_ROLE = "organiser"


def normalize_email(email: str | None) -> str:
    """Strip and lowercase; reject values that cannot be an email."""
    value = (email or "").strip().lower()
    local, sep, domain = value.partition("@")
    if not sep or not local or not domain:
        raise ValidationError(
            "A valid organiser email is required", field="organiser_email",
        )
    return value


async def _select_identity_id(db: AsyncSession, email: str) -> IdentityId | None:
    result = await db.execute(
        select(OrganiserIdentity.id).where(OrganiserIdentity.email == email),
    )
    found = result.scalar_one_or_none()
    return IdentityId(found) if found else None


class EntityMapper:
    """Organiser email → Access System identity id."""

    def __init__(self, client: AccessClient):
        self.client = client

    async def ensure_organiser(
        self,
        email: str,
        display_name: str | None = None,
        department: str | None = None,
    ) -> IdentityId:
        """Return the identity id for email, creating the identity on first use."""
        context = ErrorContext(entity_name=email, operation="ensure_organiser")
        enabled = require_enabled(self.client, context)
        default_name = (email or "").strip().partition("@")[0]
        email = normalize_email(email)
        store = enabled.store

        existing = await store.run(
            "select_organiser",
            lambda db: _select_identity_id(db, email),
            context,
        )
        if existing:
            return existing

        async def _insert(db: AsyncSession) -> IdentityId:
            identity = OrganiserIdentity(
                email=email,
                secret=secrets.token_hex(32),
                role=ORGANISER_ROLE,
                display_name=(display_name or "").strip() or default_name,
                department=(department or "").strip() or DEFAULT_ORGANISER_DEPARTMENT,
            )
            db.add(identity)
            await db.commit()
            return IdentityId(identity.id)

        try:
            created = await store.run("insert_organiser", _insert, context)
        except UniqueConflictError:
            logger.info(
                f"Organiser {email} created concurrently, re-reading",
                extra={"operation": "ensure_organiser"},
            )
            winner = await store.run(
                "reselect_organiser",
                lambda db: _select_identity_id(db, email),
                context,
            )
            if winner is None:
                raise UpstreamError(
                    "conflict reported but no identity found",
                    "insert_organiser", context,
                )
            return winner

        logger.info(
            f"Created Access System organiser identity for {email}: {created}",
            extra={"operation": "ensure_organiser"},
        )
        return created
