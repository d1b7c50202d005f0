"""Root conftest — shared Access store fixtures.

Invariants:
    - Tests never see a real Access System: ACCESS_* env vars are cleared
    - Every test gets a fresh in-memory SQLite Access store with all tables
    - access_client is the enabled variant over that store; disabled_client has no store

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares the single in-memory DB
    - approve() seeds what the Access System's approval workflow would write
"""

import os
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from gate_sync.core.domain_types import SyncStatus
from gate_sync.db.base import Base
from gate_sync.infrastructure.access_client import (
    DisabledAccessClient, EnabledAccessClient,
)
from gate_sync.infrastructure.access_store import AccessStore
from gate_sync.models import ApprovedEntity, SyncRequest
from gate_sync.schemas.records import EventRecord, FestRecord

# Tests never talk to a configured Access System
os.environ.pop("ACCESS_DATABASE_URL", None)
os.environ.pop("ACCESS_SERVICE_KEY", None)


@pytest.fixture
async def access_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def access_store(access_engine):
    return AccessStore.from_engine(access_engine, timeout_seconds=5.0)


@pytest.fixture
async def enforce_foreign_keys(access_engine):
    """Turn on SQLite FK checks, as PostgreSQL always has them."""
    # StaticPool: the pragma sticks to the one shared connection
    async with access_engine.connect() as conn:
        await conn.exec_driver_sql("PRAGMA foreign_keys=ON")
    yield
    async with access_engine.connect() as conn:
        await conn.exec_driver_sql("PRAGMA foreign_keys=OFF")


@pytest.fixture
def access_client(access_store):
    return EnabledAccessClient(store=access_store, app_url="https://gate.test")


@pytest.fixture
def disabled_client():
    return DisabledAccessClient(
        reason="missing ACCESS_DATABASE_URL, ACCESS_SERVICE_KEY",
    )


@pytest.fixture
def make_event():
    """Build an EventRecord with outsider-friendly defaults."""
    def _make(**overrides) -> EventRecord:
        data = {
            "event_id": "E1",
            "title": "Robotics Workshop",
            "description": "Hands-on robotics",
            "event_date": date(2026, 11, 3),
            "end_date": date(2026, 11, 4),
            "organizing_dept": "Computer Science",
            "outsider_max_participants": 40,
            "total_participants": 120,
            "allow_outsiders": True,
            "fest": None,
        }
        data.update(overrides)
        return EventRecord(**data)
    return _make


@pytest.fixture
def make_fest():
    def _make(**overrides) -> FestRecord:
        data = {
            "fest_id": "F1",
            "fest_title": "TechFest",
            "description": "Annual technology fest",
            "opening_date": date(2026, 12, 1),
            "closing_date": date(2026, 12, 3),
            "organizing_dept": "Engineering",
            "allow_outsiders": True,
        }
        data.update(overrides)
        return FestRecord(**data)
    return _make


@pytest.fixture
def approve(access_store):
    """Mark the sync request for a key approved, optionally inserting its ApprovedEntity."""
    async def _approve(correlation_key: str, with_entity: bool = True) -> ApprovedEntity | None:
        async with access_store.session() as db:
            result = await db.execute(
                select(SyncRequest).where(SyncRequest.correlation_key == correlation_key),
            )
            request = result.scalar_one()
            request.status = SyncStatus.APPROVED.value
            entity = None
            if with_entity:
                entity = ApprovedEntity(
                    sync_request_id=request.id,
                    name=request.display_name,
                    date_from=request.date_from,
                    date_to=request.date_to,
                    max_capacity=request.max_capacity,
                )
                db.add(entity)
            await db.commit()
            return entity
    return _approve


@pytest.fixture
def count_rows(access_store):
    """Count rows of a model (optionally filtered by a where clause)."""
    async def _count(model, *where) -> int:
        async with access_store.session() as db:
            query = select(func.count()).select_from(model)
            for clause in where:
                query = query.where(clause)
            return (await db.execute(query)).scalar_one()
    return _count


@pytest.fixture
def fetch_one(access_store):
    async def _fetch(model, *where):
        async with access_store.session() as db:
            query = select(model)
            for clause in where:
                query = query.where(clause)
            return (await db.execute(query)).scalar_one_or_none()
    return _fetch
