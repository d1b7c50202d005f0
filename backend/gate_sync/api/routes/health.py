"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness), reporting integration mode
    - GET /health/ready returns 503 only when the integration is enabled and the
      Access System is unreachable; a disabled integration is ready

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from gate_sync.infrastructure.access_client import (
    AccessClient, EnabledAccessClient, get_access_client,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(client: AccessClient = Depends(get_access_client)):
    """Basic liveness check. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "gate-sync",
        "version": "1.0.0",
        "access_integration": client.mode.value,
    }


@router.get("/ready")
async def readiness_check(client: AccessClient = Depends(get_access_client)):
    """Readiness check — includes Access System connectivity when enabled."""
    if not isinstance(client, EnabledAccessClient):
        return {"status": "ready", "checks": {"access_system": "disabled"}}
    if not await client.store.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "access_system_unavailable",
            },
        )
    return {"status": "ready", "checks": {"access_system": "healthy"}}
