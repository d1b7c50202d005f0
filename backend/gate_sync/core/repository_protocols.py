"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Events-System records reach core through structural types only

Design Decisions:
    - Protocol over ABC: pydantic schemas, ORM rows, and test doubles all satisfy
      these without inheriting from anything
"""

from datetime import date
from typing import Any, Protocol


class EventLike(Protocol):
    """Structural contract for an Events-System event record."""
    event_id: str
    title: str
    description: str | None
    event_date: date
    end_date: date | None
    organizing_dept: str | None
    outsider_max_participants: int | None
    total_participants: int | None
    allow_outsiders: Any
    fest: str | None


class FestLike(Protocol):
    """Structural contract for an Events-System fest record."""
    fest_id: str
    fest_title: str
    description: str | None
    opening_date: date
    closing_date: date | None
    organizing_dept: str | None
    allow_outsiders: Any


class FestLookup(Protocol):
    """Reads a fest by id from the Events System. None when it does not exist."""
    async def __call__(self, fest_id: str) -> FestLike | None: ...
