"""Sync Task Tracker — background pushes with an observable completion/failure channel.

Invariants:
    - submit() returns immediately with a RUNNING record; the push runs as an asyncio.Task
    - Every finished task updates its record: SUCCEEDED (row returned), SKIPPED (None
      returned, e.g. integration disabled), or FAILED (error code + message)
    - Failures are recorded and logged, never dropped
    - At most history_limit records are kept; the oldest finished ones are evicted first
    - drain() waits for all in-flight tasks (shutdown, tests)

Design Decisions:
    - In-process registry: pushes are best-effort; the Events System never blocks on them
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Awaitable, Callable

from gate_sync.config import get_settings
from gate_sync.core.domain_types import TaskStatus
from gate_sync.core.errors import GateSyncError

logger = logging.getLogger(__name__)


@dataclass
class SyncTaskRecord:
    """Outcome of one background push."""
    name: str
    correlation_key: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    status: TaskStatus = TaskStatus.RUNNING
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    result_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def done(self) -> bool:
        return self.status != TaskStatus.RUNNING


class SyncTaskTracker:
    """Submits pushes as background tasks and records how each one ended."""

    def __init__(self, history_limit: int = 500):
        self.history_limit = history_limit
        self._records: OrderedDict[uuid.UUID, SyncTaskRecord] = OrderedDict()
        self._tasks: set[asyncio.Task] = set()

    def submit(
        self,
        name: str,
        correlation_key: str,
        work: Callable[[], Awaitable[Any]],
    ) -> SyncTaskRecord:
        """Schedule work; must be called from inside a running event loop."""
        record = SyncTaskRecord(name=name, correlation_key=correlation_key)
        self._records[record.id] = record
        self._evict()
        task = asyncio.create_task(
            self._run(record, work), name=f"{name}:{correlation_key}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(
            f"Submitted {name} for '{correlation_key}'",
            extra={"task_id": str(record.id), "correlation_key": correlation_key},
        )
        return record

    def get(self, task_id: uuid.UUID) -> SyncTaskRecord | None:
        return self._records.get(task_id)

    async def drain(self) -> None:
        """Wait for every in-flight task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(
        self, record: SyncTaskRecord, work: Callable[[], Awaitable[Any]],
    ) -> None:
        extra = {"task_id": str(record.id), "correlation_key": record.correlation_key}
        try:
            result = await work()
        except GateSyncError as e:
            self._finish(record, TaskStatus.FAILED, error_code=e.code, error_message=e.message)
            logger.error(
                f"{record.name} for '{record.correlation_key}' failed: {e.message}",
                extra={**extra, "error_code": e.code},
            )
            return
        except asyncio.CancelledError:
            self._finish(record, TaskStatus.FAILED, error_code="CANCELLED", error_message="task cancelled")
            raise
        except Exception as e:
            self._finish(record, TaskStatus.FAILED, error_code="INTERNAL_ERROR", error_message=str(e))
            logger.error(
                f"{record.name} for '{record.correlation_key}' crashed: {e}",
                extra=extra, exc_info=True,
            )
            return

        if result is None:
            self._finish(record, TaskStatus.SKIPPED)
        else:
            result_id = getattr(result, "id", None)
            self._finish(
                record, TaskStatus.SUCCEEDED,
                result_id=str(result_id) if result_id is not None else None,
            )
        logger.info(f"{record.name} for '{record.correlation_key}' {record.status.value}", extra=extra)

    def _finish(self, record: SyncTaskRecord, status: TaskStatus, **fields: Any) -> None:
        record.status = status
        record.finished_at = datetime.now(timezone.utc)
        for name, value in fields.items():
            setattr(record, name, value)

    def _evict(self) -> None:
        overflow = len(self._records) - self.history_limit
        if overflow <= 0:
            return
        for task_id in [tid for tid, r in self._records.items() if r.done][:overflow]:
            del self._records[task_id]


@lru_cache
def get_sync_tracker() -> SyncTaskTracker:
    """Process-wide tracker (also the FastAPI dependency)."""
    return SyncTaskTracker(history_limit=get_settings().sync_task_history)
