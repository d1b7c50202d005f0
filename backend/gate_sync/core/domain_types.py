"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CorrelationKey is the Events-System event/fest id — never a generated value
    - IdentityId, SyncRequestId, ApprovedEntityId, CredentialId wrap UUIDs
    - All valid states encoded as Enums — no raw string matching
    - ValidityWindow.valid_to is never before valid_from once constructed through the provisioner

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stored as plain strings in the Access System tables
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

CorrelationKey = NewType("CorrelationKey", str)
IdentityId = NewType("IdentityId", UUID)
SyncRequestId = NewType("SyncRequestId", UUID)
ApprovedEntityId = NewType("ApprovedEntityId", UUID)
CredentialId = NewType("CredentialId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class SyncStatus(str, Enum):
    """SyncRequest states. Only PENDING is ever written here."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CredentialStatus(str, Enum):
    """VisitorCredential states. Credentials are born approved."""
    APPROVED = "approved"


class IntegrationMode(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class TaskStatus(str, Enum):
    """Background push outcomes — maps to SyncTaskRecord.status."""
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class VisitorIdentity:
    """The non-member attendee a credential is issued to."""
    name: str
    email: str | None = None
    phone: str | None = None
    register_number: str | None = None


@dataclass(frozen=True)
class ValidityWindow:
    valid_from: date
    valid_to: date
