"""Visitor Provisioner — issues gate-entry credentials to non-member attendees.

Invariants:
    - approved_entity None → ValidationError before any store access
    - Blank visitor name or inverted validity window → ValidationError, no store write
    - An approved_entity the Access System does not hold → ValidationError on
      approved_entity, never a conflict
    - Disabled integration → IntegrationDisabled (surfaced: the caller is granting entry)
    - Credentials are created with status "approved", category "student"
    - Does not call ResolutionResolver: check and act stay separately testable

Design Decisions:
    - Failures propagate to the caller; nothing here is best-effort
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from gate_sync.core.domain_types import (
    CredentialStatus, ValidityWindow, VisitorIdentity,
)
from gate_sync.core.errors import ErrorContext, GateSyncError, ValidationError
from gate_sync.core.verify_reference import verification_reference
from gate_sync.infrastructure.access_client import AccessClient, require_enabled
from gate_sync.models.approved_entity import ApprovedEntity
from gate_sync.models.visitor_credential import VisitorCredential

logger = logging.getLogger(__name__)

VISITOR_CATEGORY = "student"
VISITOR_PURPOSE = "Event registration via the Events System"


def _validate(
    identity: VisitorIdentity,
    event_name: str,
    window: ValidityWindow,
    approved_entity: ApprovedEntity | None,
    context: ErrorContext,
) -> None:
    if approved_entity is None:
        raise ValidationError(
            "A resolved approved entity is required to issue a visitor credential",
            field="approved_entity", context=context,
        )
    if not identity.name or not identity.name.strip():
        raise ValidationError(
            "Visitor name cannot be empty", field="name", context=context,
        )
    if not event_name or not event_name.strip():
        raise ValidationError(
            "Event name cannot be empty", field="event_name", context=context,
        )
    if window.valid_to < window.valid_from:
        raise ValidationError(
            "Validity window ends before it starts",
            field="valid_to", context=context,
        )


class VisitorProvisioner:
    """Creates VisitorCredentials against an already-approved entity."""

    def __init__(self, client: AccessClient):
        self.client = client

    async def create_visitor_credential(
        self,
        identity: VisitorIdentity,
        event_name: str,
        validity_window: ValidityWindow,
        approved_entity: ApprovedEntity | None,
    ) -> VisitorCredential:
        """Issue one credential. Raises on any failure."""
        context = ErrorContext(
            entity_name=event_name, operation="create_visitor_credential",
        )
        _validate(identity, event_name, validity_window, approved_entity, context)
        store = require_enabled(self.client, context).store

        async def _insert(db: AsyncSession) -> VisitorCredential:
            credential = VisitorCredential(
                approved_entity_id=approved_entity.id,
                name=identity.name.strip(),
                email=identity.email or None,
                phone=identity.phone or None,
                register_number=identity.register_number or None,
                event_name=event_name.strip(),
                valid_from=validity_window.valid_from,
                valid_to=validity_window.valid_to,
                visitor_category=VISITOR_CATEGORY,
                purpose=VISITOR_PURPOSE,
                status=CredentialStatus.APPROVED.value,
            )
            db.add(credential)
            await db.commit()
            return credential

        try:
            credential = await store.run(
                "insert_visitor_credential", _insert, context,
            )
        except ValidationError as e:
            logger.error(
                f"Approved entity {approved_entity.id} missing from the Access System",
                extra={**context.as_log_extra(), "error_code": e.code},
            )
            raise ValidationError(
                "Approved entity does not exist in the Access System",
                field="approved_entity", context=context,
            ) from e
        except GateSyncError as e:
            logger.error(
                f"Failed to issue visitor credential for {identity.name}: {e.message}",
                extra={**context.as_log_extra(), "error_code": e.code},
            )
            raise

        logger.info(
            f"Issued visitor credential for {identity.name} ({credential.id})",
            extra=context.as_log_extra(),
        )
        return credential

    def verification_reference(self, credential: VisitorCredential) -> str:
        """QR payload for credential (unsigned)."""
        return verification_reference(
            require_enabled(self.client).app_url, credential.id,
        )
