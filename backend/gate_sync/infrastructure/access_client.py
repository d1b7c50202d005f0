"""Access Client — tagged enabled/disabled handle to the Access System.

Invariants:
    - Exactly two variants: EnabledAccessClient (holds an AccessStore) and
      DisabledAccessClient (holds only the reason)
    - Enabled iff access_database_url AND access_service_key are configured
    - get_access_client() decides once per process (lru_cache) and logs the mode once
    - Building a client never opens a connection

Design Decisions:
    - Components receive the client explicitly: no module-level connection handle
    - require_enabled() is the single place that turns "disabled" into IntegrationDisabled
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Union

from gate_sync.config import Settings, get_settings
from gate_sync.core.domain_types import IntegrationMode
from gate_sync.core.errors import ErrorContext, IntegrationDisabled
from gate_sync.infrastructure.access_store import AccessStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnabledAccessClient:
    store: AccessStore
    app_url: str
    enabled: Literal[True] = True

    @property
    def mode(self) -> IntegrationMode:
        return IntegrationMode.ENABLED


@dataclass(frozen=True)
class DisabledAccessClient:
    reason: str
    enabled: Literal[False] = False

    @property
    def mode(self) -> IntegrationMode:
        return IntegrationMode.DISABLED


AccessClient = Union[EnabledAccessClient, DisabledAccessClient]


def build_access_client(settings: Settings) -> AccessClient:
    """Pick the client variant from configuration."""
    if not settings.access_configured:
        missing = [
            name for name, value in (
                ("ACCESS_DATABASE_URL", settings.access_database_url),
                ("ACCESS_SERVICE_KEY", settings.access_service_key),
            )
            if not value
        ]
        return DisabledAccessClient(reason=f"missing {', '.join(missing)}")
    store = AccessStore(
        settings.access_database_url,
        settings.access_service_key,
        pool_size=settings.access_pool_size,
        max_overflow=settings.access_max_overflow,
        timeout_seconds=settings.access_timeout_seconds,
    )
    return EnabledAccessClient(store=store, app_url=settings.access_app_url)


@lru_cache
def get_access_client() -> AccessClient:
    """Process-wide client (also the FastAPI dependency)."""
    client = build_access_client(get_settings())
    if isinstance(client, DisabledAccessClient):
        logger.warning(
            f"Access System integration disabled ({client.reason})",
        )
    else:
        logger.info("Access System integration enabled")
    return client


def require_enabled(
    client: AccessClient, context: ErrorContext | None = None,
) -> EnabledAccessClient:
    """Narrow to the enabled variant or raise IntegrationDisabled."""
    if isinstance(client, EnabledAccessClient):
        return client
    raise IntegrationDisabled(context)
