"""ORM Models — the four Access System record kinds this service reads or writes.

Invariants:
    - All models inherit from Base (db/base.py)
    - OrganiserIdentity, SyncRequest, VisitorCredential are written here
    - ApprovedEntity is only ever read (the Access System's approval workflow writes it)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from gate_sync.models.organiser_identity import OrganiserIdentity  # noqa: F401
from gate_sync.models.sync_request import SyncRequest  # noqa: F401
from gate_sync.models.approved_entity import ApprovedEntity  # noqa: F401
from gate_sync.models.visitor_credential import VisitorCredential  # noqa: F401
