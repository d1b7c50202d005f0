"""Sync Request Drafts — derives the Access System representation of an event or fest.

Invariants:
    - max_capacity = outsider_max ?? total_participants ?? 100
    - expected_participants = min(outsider_max ?? max_capacity, max_capacity)
    - Zero/negative capacities count as absent
    - Fests carry the "[FEST] " label and fixed 500/1000 estimates
    - date_to falls back to date_from when the record has no end date
    - A draft never carries status: status is owned by the Access System after insert

Design Decisions:
    - Drafts are frozen dataclasses: the gateway applies the same draft to insert and update paths
"""

from dataclasses import dataclass, asdict
from datetime import date

from gate_sync.core.domain_types import CorrelationKey
from gate_sync.core.errors import ErrorContext, ValidationError
from gate_sync.core.repository_protocols import EventLike, FestLike

SOURCE_TAG = "events"
DEFAULT_MAX_CAPACITY = 100
DEFAULT_DEPARTMENT = "General"
FEST_LABEL_PREFIX = "[FEST] "
FEST_EXPECTED_PARTICIPANTS = 500
FEST_MAX_CAPACITY = 1000


@dataclass(frozen=True)
class SyncRequestDraft:
    """Mutable SyncRequest fields for one push."""
    correlation_key: CorrelationKey
    department: str
    display_name: str
    description: str | None
    date_from: date
    date_to: date
    expected_participants: int
    max_capacity: int
    source: str = SOURCE_TAG

    def mutable_fields(self) -> dict:
        """Fields an update may overwrite (everything except the key)."""
        fields = asdict(self)
        fields.pop("correlation_key")
        return fields


def _positive(value: int | None) -> int | None:
    return value if value is not None and value > 0 else None


def compute_capacity(
    outsider_max: int | None, total_participants: int | None,
) -> tuple[int, int]:
    """Return (expected_participants, max_capacity)."""
    outsider_max = _positive(outsider_max)
    total_participants = _positive(total_participants)
    if outsider_max is not None:
        max_capacity = outsider_max
    elif total_participants is not None:
        max_capacity = total_participants
    else:
        max_capacity = DEFAULT_MAX_CAPACITY
    expected = outsider_max if outsider_max is not None else max_capacity
    return min(expected, max_capacity), max_capacity


def _require_key(key: str | None, field: str, name: str | None) -> CorrelationKey:
    if not key or not str(key).strip():
        raise ValidationError(
            f"{field} is required to push to the Access System",
            field=field, context=ErrorContext(entity_name=name),
        )
    return CorrelationKey(str(key).strip())


def _require_name(value: str | None, field: str, key: str) -> str:
    if not value or not value.strip():
        raise ValidationError(
            f"{field} cannot be empty", field=field,
            context=ErrorContext(correlation_key=key),
        )
    return value.strip()


def draft_for_event(event: EventLike) -> SyncRequestDraft:
    """Build the SyncRequest draft for a single event."""
    key = _require_key(event.event_id, "event_id", event.title)
    expected, max_capacity = compute_capacity(
        event.outsider_max_participants, event.total_participants,
    )
    return SyncRequestDraft(
        correlation_key=key,
        department=event.organizing_dept or DEFAULT_DEPARTMENT,
        display_name=_require_name(event.title, "title", key),
        description=event.description or None,
        date_from=event.event_date,
        date_to=event.end_date or event.event_date,
        expected_participants=expected,
        max_capacity=max_capacity,
    )


def draft_for_fest(fest: FestLike) -> SyncRequestDraft:
    """Build the aggregate SyncRequest draft covering a fest and its child events."""
    key = _require_key(fest.fest_id, "fest_id", fest.fest_title)
    title = _require_name(fest.fest_title, "fest_title", key)
    return SyncRequestDraft(
        correlation_key=key,
        department=fest.organizing_dept or DEFAULT_DEPARTMENT,
        display_name=f"{FEST_LABEL_PREFIX}{title}",
        description=fest.description or None,
        date_from=fest.opening_date,
        date_to=fest.closing_date or fest.opening_date,
        expected_participants=FEST_EXPECTED_PARTICIPANTS,
        max_capacity=FEST_MAX_CAPACITY,
    )
