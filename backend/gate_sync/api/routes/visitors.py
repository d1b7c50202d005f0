"""Visitor Routes — the registration path's gate-pass issuance for non-member attendees.

Invariants:
    - Resolve first, then provision: an unapproved key answers 409 NOT_YET_APPROVED
    - Every failure is surfaced (no background execution, no swallowing)
    - Disabled integration answers 503 INTEGRATION_DISABLED
"""

import logging

from fastapi import APIRouter, Depends, status

from gate_sync.core.domain_types import ValidityWindow, VisitorIdentity
from gate_sync.core.errors import ErrorContext, NotYetApprovedError
from gate_sync.infrastructure.access_client import (
    AccessClient, get_access_client, require_enabled,
)
from gate_sync.schemas.visitor import (
    VisitorCredentialCreate, VisitorCredentialResponse,
)
from gate_sync.services.resolution_resolver import ResolutionResolver
from gate_sync.services.visitor_provisioner import VisitorProvisioner

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/visitors", tags=["visitors"])


@router.post(
    "", response_model=VisitorCredentialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_visitor(
    body: VisitorCredentialCreate,
    client: AccessClient = Depends(get_access_client),
):
    """Issue a gate-entry credential for an approved event/fest."""
    context = ErrorContext(
        correlation_key=body.correlation_key, entity_name=body.event_name,
    )
    enabled = require_enabled(client, context)

    entity = await ResolutionResolver(enabled).resolve(body.correlation_key)
    if entity is None:
        raise NotYetApprovedError(body.correlation_key, context)

    provisioner = VisitorProvisioner(enabled)
    credential = await provisioner.create_visitor_credential(
        VisitorIdentity(
            name=body.name, email=body.email, phone=body.phone,
            register_number=body.register_number,
        ),
        body.event_name,
        ValidityWindow(valid_from=body.valid_from, valid_to=body.valid_to),
        entity,
    )
    return VisitorCredentialResponse(
        id=credential.id,
        approved_entity_id=credential.approved_entity_id,
        name=credential.name,
        event_name=credential.event_name,
        valid_from=credential.valid_from,
        valid_to=credential.valid_to,
        status=credential.status,
        verification_reference=provisioner.verification_reference(credential),
    )
