"""Verification Reference — the gate-scanner URL encoded into a visitor's QR code.

Invariants:
    - Deterministic in (base_url, credential_id); trailing "/" on base_url ignored
    - Unsigned: anyone holding a credential id can build the reference
"""

from urllib.parse import urlencode
from uuid import UUID


def verification_reference(base_url: str, credential_id: UUID | str) -> str:
    """Build the Access System verify URL for a credential."""
    return f"{base_url.rstrip('/')}/verify?{urlencode({'id': str(credential_id)})}"
