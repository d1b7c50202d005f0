"""Core Layer — pure sync rules: flag parsing, request drafts, verification references.

Invariants:
    - No module in core/ touches the Access store, the network, or FastAPI
    - Everything here is deterministic and testable without fixtures
"""
