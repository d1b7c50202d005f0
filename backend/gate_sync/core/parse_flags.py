"""Flag Parsing — normalizes loosely-typed truthy flags at the Events System boundary.

Invariants:
    - Exactly these literals are true: True, numeric 1 (1 or 1.0), "true", "1"
      (strings compared stripped and lowercased)
    - Everything else is false: False, 0, 2, 1.5, "yes", "on", None, dicts
    - Pure function — no IO, deterministic

Design Decisions:
    - Enumerated literal set over bool(): "false" and "0" are truthy strings in Python
    - JSON has one number type, so a producer sending 1.0 means the same as 1
"""

from typing import Any

TRUE_STRINGS = frozenset({"true", "1"})


def parse_flag(value: Any) -> bool:
    """Normalize a mixed bool/int/float/str flag to a bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return False
