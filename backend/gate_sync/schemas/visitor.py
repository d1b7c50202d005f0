"""Visitor Schemas — credential issuance request and response.

Invariants:
    - name: 1-200 chars, stripped, non-empty
    - valid_to >= valid_from (cross-validated)
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


class VisitorCredentialCreate(BaseModel):
    """Issue a gate pass to a non-member registered for an event/fest."""
    correlation_key: str = Field(min_length=1, max_length=200)
    event_name: str = Field(min_length=1, max_length=300)
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(None, max_length=320)
    phone: str | None = Field(None, max_length=40)
    register_number: str | None = Field(None, max_length=64)
    valid_from: date
    valid_to: date

    @field_validator("name", "correlation_key")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def check_window(self) -> "VisitorCredentialCreate":
        if self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")
        return self


class VisitorCredentialResponse(BaseModel):
    id: UUID
    approved_entity_id: UUID
    name: str
    event_name: str
    valid_from: date
    valid_to: date
    status: str
    verification_reference: str
