"""Gate Sync API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map GateSyncError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Integration mode decided once on startup; the Access store and Events lookup
      are released on shutdown after in-flight pushes drain

Design Decisions:
    - Lifespan over @app.on_event: cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gate_sync.api.error_handlers import register_error_handlers
from gate_sync.api.routes import health, sync, visitors
from gate_sync.config import get_settings
from gate_sync.infrastructure.access_client import (
    EnabledAccessClient, get_access_client,
)
from gate_sync.infrastructure.events_lookup import get_events_lookup
from gate_sync.infrastructure.observability import setup_logging
from gate_sync.services.sync_tasks import get_sync_tracker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    client = get_access_client()
    logger.info(f"Gate Sync API started (access integration {client.mode.value})")
    yield
    await get_sync_tracker().drain()
    if isinstance(client, EnabledAccessClient):
        await client.store.dispose()
    await get_events_lookup().aclose()
    logger.info("Gate Sync API shutting down")


app = FastAPI(
    title="Gate Sync API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(sync.router)
app.include_router(visitors.router)

register_error_handlers(app)
