"""Events Lookup — reads fest records from the Events System over HTTP.

Invariants:
    - GET {events_api_url}/api/fests/{fest_id} → {"fest": {...}}
    - 404 → None (fest does not exist)
    - Timeouts, connection failures, 5xx/4xx and malformed payloads → UpstreamError
    - Never writes to the Events System

Design Decisions:
    - httpx.AsyncClient kept open for the process: connection reuse across pushes
    - transport injectable: tests use httpx.MockTransport instead of a live server
"""

import logging
from functools import lru_cache
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from gate_sync.config import get_settings
from gate_sync.core.errors import ErrorContext, UpstreamError
from gate_sync.schemas.records import FestRecord

logger = logging.getLogger(__name__)


class EventsLookup:
    """Fest reader used as SuppressionPolicy's fest_lookup."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    async def get_fest(self, fest_id: str) -> FestRecord | None:
        """Fetch one fest by id."""
        context = ErrorContext(correlation_key=fest_id, operation="get_fest")
        try:
            response = await self._client.get(
                f"/api/fests/{quote(fest_id, safe='')}",
            )
        except httpx.TimeoutException:
            raise UpstreamError("Events System timed out", "get_fest", context)
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"Events System unreachable: {e}", "get_fest", context,
            )

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            raise UpstreamError(
                f"Events System returned {response.status_code}",
                "get_fest", context,
            )

        try:
            payload = response.json().get("fest")
            return FestRecord.model_validate(payload) if payload else None
        except (ValueError, AttributeError, PydanticValidationError) as e:
            logger.warning(
                f"Malformed fest payload for {fest_id}: {e}",
                extra={"correlation_key": fest_id},
            )
            raise UpstreamError("malformed fest payload", "get_fest", context)

    async def aclose(self) -> None:
        await self._client.aclose()


@lru_cache
def get_events_lookup() -> EventsLookup:
    """Process-wide lookup (also the FastAPI dependency)."""
    settings = get_settings()
    return EventsLookup(
        settings.events_api_url, timeout_seconds=settings.events_timeout_seconds,
    )
