"""Sync Gateway — idempotently upserts events and fests into the Access System as pending requests.

Invariants:
    - Disabled integration → None, no store or network call
    - One SyncRequest per correlation key: repeated pushes update in place
    - An update never touches id, correlation_key, or status
    - New rows are inserted as pending
    - An insert that loses a UNIQUE(correlation_key) race falls back to the update path
    - Every failure is logged with entity name + correlation key before propagating

Design Decisions:
    - Update-first: the common case (re-push after an edit) costs one round trip
    - Both event and fest pushes share _upsert; only the draft differs
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gate_sync.core.build_requests import (
    SyncRequestDraft, draft_for_event, draft_for_fest,
)
from gate_sync.core.domain_types import IdentityId, SyncStatus
from gate_sync.core.errors import (
    ErrorContext, GateSyncError, IntegrationDisabled, UniqueConflictError,
    UpstreamError,
)
from gate_sync.core.repository_protocols import EventLike, FestLike
from gate_sync.infrastructure.access_client import (
    AccessClient, DisabledAccessClient, require_enabled,
)
from gate_sync.models.sync_request import SyncRequest
from gate_sync.services.entity_mapper import EntityMapper

logger = logging.getLogger(__name__)

UNKNOWN_DEPARTMENT = "Unknown"


async def _update_existing(
    db: AsyncSession, draft: SyncRequestDraft, organiser_id: IdentityId,
) -> SyncRequest | None:
    """Refresh mutable fields of the row for draft's key. None when absent."""
    result = await db.execute(
        select(SyncRequest).where(
            SyncRequest.correlation_key == draft.correlation_key,
        ),
    )
    row = result.scalar_one_or_none()
    if row is None:
        return None
    for name, value in draft.mutable_fields().items():
        setattr(row, name, value)
    row.organiser_id = organiser_id
    row.updated_at = datetime.now(timezone.utc)
    await db.commit()
    return row


async def _insert_pending(
    db: AsyncSession, draft: SyncRequestDraft, organiser_id: IdentityId,
) -> SyncRequest:
    row = SyncRequest(
        correlation_key=draft.correlation_key,
        organiser_id=organiser_id,
        status=SyncStatus.PENDING.value,
        **draft.mutable_fields(),
    )
    db.add(row)
    await db.commit()
    return row


class SyncGateway:
    """Pushes events and fests as pending SyncRequests."""

    def __init__(self, client: AccessClient, mapper: EntityMapper | None = None):
        self.client = client
        self.mapper = mapper or EntityMapper(client)

    async def push_event(
        self, event: EventLike, organiser_email: str, organiser_name: str | None,
    ) -> SyncRequest | None:
        """Upsert the SyncRequest for a single event."""
        if isinstance(self.client, DisabledAccessClient):
            logger.warning(
                f"Access System integration not configured, skipping push of event '{event.title}'",
                extra={"correlation_key": event.event_id},
            )
            return None
        context = ErrorContext(
            correlation_key=event.event_id, entity_name=event.title,
            operation="push_event",
        )
        return await self._push(
            lambda: draft_for_event(event),
            organiser_email, organiser_name,
            event.organizing_dept or UNKNOWN_DEPARTMENT, context,
        )

    async def push_fest(
        self, fest: FestLike, organiser_email: str, organiser_name: str | None,
    ) -> SyncRequest | None:
        """Upsert the aggregate SyncRequest for a fest."""
        if isinstance(self.client, DisabledAccessClient):
            logger.warning(
                f"Access System integration not configured, skipping push of fest '{fest.fest_title}'",
                extra={"correlation_key": fest.fest_id},
            )
            return None
        context = ErrorContext(
            correlation_key=fest.fest_id, entity_name=fest.fest_title,
            operation="push_fest",
        )
        return await self._push(
            lambda: draft_for_fest(fest),
            organiser_email, organiser_name,
            fest.organizing_dept or UNKNOWN_DEPARTMENT, context,
        )

    async def _push(
        self,
        build_draft,
        organiser_email: str,
        organiser_name: str | None,
        organiser_department: str,
        context: ErrorContext,
    ) -> SyncRequest | None:
        try:
            draft = build_draft()
            organiser_id = await self.mapper.ensure_organiser(
                organiser_email, organiser_name, organiser_department,
            )
            return await self._upsert(draft, organiser_id, context)
        except IntegrationDisabled:
            return None
        except GateSyncError as e:
            e.with_context(context)
            logger.error(
                f"Failed to push '{context.entity_name}' to Access System: {e.message}",
                extra={**context.as_log_extra(), "error_code": e.code},
            )
            raise

    async def _upsert(
        self, draft: SyncRequestDraft, organiser_id: IdentityId, context: ErrorContext,
    ) -> SyncRequest:
        store = require_enabled(self.client, context).store

        updated = await store.run(
            "update_sync_request",
            lambda db: _update_existing(db, draft, organiser_id),
            context,
        )
        if updated is not None:
            logger.info(
                f"Updated sync request for '{draft.display_name}' ({updated.id})",
                extra=context.as_log_extra(),
            )
            return updated

        try:
            created = await store.run(
                "insert_sync_request",
                lambda db: _insert_pending(db, draft, organiser_id),
                context,
            )
        except UniqueConflictError:
            logger.info(
                f"Sync request for '{draft.correlation_key}' created concurrently, updating",
                extra=context.as_log_extra(),
            )
            winner = await store.run(
                "update_sync_request",
                lambda db: _update_existing(db, draft, organiser_id),
                context,
            )
            if winner is None:
                raise UpstreamError(
                    "conflict reported but no sync request found",
                    "insert_sync_request", context,
                )
            return winner

        logger.info(
            f"Pushed '{draft.display_name}' to Access System as pending ({created.id})",
            extra=context.as_log_extra(),
        )
        return created
