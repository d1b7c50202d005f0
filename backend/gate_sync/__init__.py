"""Gate Sync — Events System ↔ Access System synchronization service.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
