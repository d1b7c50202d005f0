"""Alembic environment — builds the Access System tables in local and test stores.

The production Access System owns its own schema; these migrations exist so a
developer can run the sync service against a disposable Postgres.

Design Decisions:
    - Connection settings come from gate_sync.config.Settings: the same
      ACCESS_DATABASE_URL / ACCESS_SERVICE_KEY the service reads, same blank
      handling and asyncpg URL rewrite
    - sqlalchemy.url in alembic.ini is only used when ACCESS_DATABASE_URL is unset
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import gate_sync.models  # noqa: F401  (registers the four tables on Base.metadata)
from gate_sync.config import Settings
from gate_sync.db.base import Base
from gate_sync.infrastructure.access_store import build_access_url

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _access_url() -> str:
    settings = Settings()
    if not settings.access_database_url:
        fallback = config.get_main_option("sqlalchemy.url")
        if not fallback:
            raise RuntimeError(
                "Set ACCESS_DATABASE_URL or sqlalchemy.url in alembic.ini",
            )
        return fallback
    url = build_access_url(settings.access_database_url, settings.access_service_key)
    return url.render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=_access_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _access_url()
    engine = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
