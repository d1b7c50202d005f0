"""Events-System Records — the event and fest shapes this service receives.

Invariants:
    - event_id / fest_id are the correlation keys (non-empty, stripped)
    - allow_outsiders is kept raw (bool, int, or str); parse_flag normalizes it
    - Unknown fields from the Events System are ignored

Design Decisions:
    - allow_outsiders typed Any: pydantic's lax mode would coerce "yes" and "on"
      before the enumerated parser sees them
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventRecord(BaseModel):
    """Events-System event as pushed by the write path."""
    model_config = ConfigDict(extra="ignore")

    event_id: str = Field(min_length=1, max_length=200)
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    event_date: date
    end_date: date | None = None
    organizing_dept: str | None = None
    outsider_max_participants: int | None = None
    total_participants: int | None = None
    allow_outsiders: Any = False
    fest: str | None = None

    @field_validator("event_id", "title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v

    @field_validator("fest")
    @classmethod
    def blank_fest_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class FestRecord(BaseModel):
    """Events-System fest (an aggregate of child events)."""
    model_config = ConfigDict(extra="ignore")

    fest_id: str = Field(min_length=1, max_length=200)
    fest_title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    opening_date: date
    closing_date: date | None = None
    organizing_dept: str | None = None
    allow_outsiders: Any = False

    @field_validator("fest_id", "fest_title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v
