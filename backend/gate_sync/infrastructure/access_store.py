"""Access Store — async connection pool to the Access System database with deadlines and error mapping.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Every run() is bounded by timeout_seconds; expiry raises UpstreamError
    - Only a unique violation (SQLSTATE 23505 / sqlite "UNIQUE constraint failed")
      maps to UniqueConflictError; callers re-read the winner
    - A foreign key violation (23503) maps to ValidationError: the caller named a
      record the Access System does not hold
    - Any other integrity violation (NOT NULL, CHECK) maps to UpstreamError
    - All other SQLAlchemy/driver/socket errors map to UpstreamError
    - GateSyncError raised by the work itself passes through unchanged

Design Decisions:
    - The service credential is injected as the URL password: the endpoint setting
      stays free of secrets
    - expire_on_commit=False: rows stay readable after the session closes
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from gate_sync.core.errors import (
    ErrorContext, GateSyncError, UniqueConflictError, UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

# asyncpg exposes sqlstate, psycopg pgcode; sqlite only has the message
_DRIVER_CLASSES = {
    "UniqueViolationError": UNIQUE_VIOLATION,
    "ForeignKeyViolationError": FOREIGN_KEY_VIOLATION,
}
_SQLITE_MESSAGES = {
    "UNIQUE constraint failed": UNIQUE_VIOLATION,
    "FOREIGN KEY constraint failed": FOREIGN_KEY_VIOLATION,
}


def integrity_sqlstate(error: IntegrityError) -> str | None:
    """Best-effort SQLSTATE for an IntegrityError across drivers."""
    orig = error.orig
    # SQLAlchemy's asyncpg adapter keeps the driver error as __cause__
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        for attr in ("sqlstate", "pgcode"):
            code = getattr(candidate, attr, None)
            if isinstance(code, str) and code:
                return code
        name = type(candidate).__name__
        if name in _DRIVER_CLASSES:
            return _DRIVER_CLASSES[name]
    message = str(orig)
    for fragment, code in _SQLITE_MESSAGES.items():
        if fragment in message:
            return code
    return None


def build_access_url(database_url: str, service_key: str | None):
    """Inject the service credential as the connection password."""
    url = make_url(database_url)
    if service_key and not url.drivername.startswith("sqlite"):
        url = url.set(password=service_key)
    return url


class AccessStore:
    """Async sessions against the Access System tables, with deadline and error mapping."""

    def __init__(
        self,
        database_url: str,
        service_key: str | None = None,
        pool_size: int = 5,
        max_overflow: int = 5,
        timeout_seconds: float = 10.0,
    ):
        url = build_access_url(database_url, service_key)
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not url.drivername.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self._init(create_async_engine(url, **engine_kwargs), timeout_seconds)

    @classmethod
    def from_engine(
        cls, engine: AsyncEngine, timeout_seconds: float = 10.0,
    ) -> "AccessStore":
        """Wrap an existing engine (tests, scripts)."""
        store = cls.__new__(cls)
        store._init(engine, timeout_seconds)
        return store

    def _init(self, engine: AsyncEngine, timeout_seconds: float) -> None:
        self.engine = engine
        self.timeout_seconds = timeout_seconds
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str = "query",
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback and error mapping."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            sqlstate = integrity_sqlstate(e)
            if sqlstate == UNIQUE_VIOLATION:
                logger.warning(
                    f"Access store unique conflict: {e.orig}",
                    extra={"operation": operation},
                )
                raise UniqueConflictError(operation)
            if sqlstate == FOREIGN_KEY_VIOLATION:
                logger.warning(
                    f"Access store missing reference: {e.orig}",
                    extra={"operation": operation},
                )
                raise ValidationError(
                    "Referenced Access System record does not exist",
                    field="reference",
                )
            logger.error(
                f"Access store integrity violation: {e.orig}",
                extra={"operation": operation},
            )
            raise UpstreamError("Integrity constraint violated", operation)
        except OperationalError as e:
            await session.rollback()
            logger.error(f"Access store operational error: {e}")
            raise UpstreamError("Connection or operational error", operation)
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"Access store driver error: {e}")
            raise UpstreamError("Database driver error", operation)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Access store SQLAlchemy error: {e}")
            raise UpstreamError("Database operation failed", operation)
        except OSError as e:
            await session.rollback()
            logger.error(f"Access store unreachable: {e}")
            raise UpstreamError("Access System unreachable", operation)
        finally:
            await session.close()

    async def run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        context: ErrorContext | None = None,
    ) -> T:
        """Run one unit of work in its own session, bounded by the deadline."""

        async def _in_session() -> T:
            async with self.session(operation) as db:
                return await work(db)

        try:
            return await asyncio.wait_for(
                _in_session(), timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Access store {operation} exceeded {self.timeout_seconds}s",
                extra={"operation": operation},
            )
            raise UpstreamError(
                f"deadline of {self.timeout_seconds}s exceeded",
                operation, context=context,
            )
        except GateSyncError as e:
            if context is not None:
                e.with_context(context)
            raise

    async def health_check(self) -> bool:
        """Check Access System connectivity (for readiness checks)."""
        try:
            await self.run("health_check", lambda db: db.execute(text("SELECT 1")))
            return True
        except Exception as e:
            logger.error(f"Access store health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
