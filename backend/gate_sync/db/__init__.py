"""Database Infrastructure — SQLAlchemy Base for the Access System tables.

Invariants:
    - Access System tables share one metadata (db/base.py)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL in production, aiosqlite in tests
"""
