"""Suppression Policy — decides whether an event should be pushed to the Access System at all.

Invariants:
    - Event flag false (per parse_flag) → False, fest never consulted
    - Parent fest whose own flag is true → False (the fest push covers its capacity)
    - No parent fest, fest not found, or fest flag false → True
    - Fest lookup failure → True (fail-open: the event is represented individually)

Design Decisions:
    - Plain async function: the policy holds no state, fest_lookup is passed per call
"""

import logging

from gate_sync.core.parse_flags import parse_flag
from gate_sync.core.repository_protocols import EventLike, FestLookup

logger = logging.getLogger(__name__)


async def should_push(event: EventLike, fest_lookup: FestLookup) -> bool:
    """Whether event warrants its own SyncRequest."""
    if not parse_flag(event.allow_outsiders):
        return False

    if not event.fest:
        return True

    try:
        fest = await fest_lookup(event.fest)
    except Exception as e:
        logger.warning(
            f"Could not check fest '{event.fest}' for event '{event.title}', "
            f"pushing individually: {e}",
            extra={"correlation_key": event.event_id, "entity_name": event.title},
        )
        return True

    if fest is not None and parse_flag(fest.allow_outsiders):
        logger.info(
            f"Event '{event.title}' is covered by fest '{event.fest}' "
            "which already admits outsiders, skipping individual push",
            extra={"correlation_key": event.event_id, "entity_name": event.title},
        )
        return False
    return True
