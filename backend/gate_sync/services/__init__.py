"""Services Layer — the five sync components plus background push tracking.

Invariants:
    - Every component receives its AccessClient explicitly (constructor or argument)
    - Components hold no state between calls beyond request-scoped data
    - Only services/ talks to the Access System tables
"""
