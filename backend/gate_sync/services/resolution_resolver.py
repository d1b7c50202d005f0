"""Resolution Resolver — correlation key → approved Access System entity, if approval has happened.

Invariants:
    - Disabled integration → None, no store call
    - Never pushed → None
    - Pushed but pending/rejected → None (normal outcome, not an error)
    - Approved with no approved entity → IntegrationInconsistency, logged at ERROR
    - Approved with entity → the entity
    - Read-only: never writes to any Access System table

Design Decisions:
    - Request and entity read in one session: a single round trip per resolve
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gate_sync.core.domain_types import SyncStatus
from gate_sync.core.errors import (
    ErrorContext, GateSyncError, IntegrationInconsistency,
)
from gate_sync.infrastructure.access_client import (
    AccessClient, EnabledAccessClient,
)
from gate_sync.models.approved_entity import ApprovedEntity
from gate_sync.models.sync_request import SyncRequest

logger = logging.getLogger(__name__)


async def _read_request_and_entity(
    db: AsyncSession, correlation_key: str,
) -> tuple[SyncRequest | None, ApprovedEntity | None]:
    result = await db.execute(
        select(SyncRequest).where(SyncRequest.correlation_key == correlation_key),
    )
    request = result.scalar_one_or_none()
    if request is None or request.status != SyncStatus.APPROVED.value:
        return request, None
    result = await db.execute(
        select(ApprovedEntity).where(ApprovedEntity.sync_request_id == request.id),
    )
    return request, result.scalar_one_or_none()


class ResolutionResolver:
    """Observes the Access System's approval outcome for pushed entities."""

    def __init__(self, client: AccessClient):
        self.client = client

    async def resolve(self, correlation_key: str) -> ApprovedEntity | None:
        """The approved entity for correlation_key, or None when not (yet) approved."""
        if not isinstance(self.client, EnabledAccessClient):
            return None
        context = ErrorContext(correlation_key=correlation_key, operation="resolve")

        try:
            request, entity = await self.client.store.run(
                "resolve",
                lambda db: _read_request_and_entity(db, correlation_key),
                context,
            )
        except GateSyncError as e:
            e.with_context(context)
            logger.error(
                f"Failed to resolve '{correlation_key}' against Access System: {e.message}",
                extra={**context.as_log_extra(), "error_code": e.code},
            )
            raise

        if request is None:
            logger.info(
                f"No sync request found for '{correlation_key}'",
                extra=context.as_log_extra(),
            )
            return None

        context.entity_name = request.display_name
        if request.status != SyncStatus.APPROVED.value:
            logger.info(
                f"Sync request for '{correlation_key}' is {request.status}, not yet approved",
                extra=context.as_log_extra(),
            )
            return None

        if entity is None:
            error = IntegrationInconsistency(
                correlation_key, str(request.id), context,
            )
            logger.error(
                error.message,
                extra={**context.as_log_extra(), "error_code": error.code},
            )
            raise error
        return entity
