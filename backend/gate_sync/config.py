"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - The Access System integration is enabled only when BOTH
      access_database_url and access_service_key are set

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Empty strings count as "not set": docker-compose passes blank vars through
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Access System (endpoint + service credential toggle the integration)
    access_database_url: str | None = None
    access_service_key: str | None = None
    access_app_url: str = "https://gate.example.edu"
    access_timeout_seconds: float = 10.0
    access_pool_size: int = 5
    access_max_overflow: int = 5

    @field_validator("access_database_url", "access_service_key", mode="before")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("access_database_url", mode="after")
    @classmethod
    def convert_postgres_url(cls, v: str | None) -> str | None:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Events System (fest lookups for suppression)
    events_api_url: str = "http://localhost:8000"
    events_timeout_seconds: float = 5.0

    # Background pushes
    sync_task_history: int = 500

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def access_configured(self) -> bool:
        return bool(self.access_database_url and self.access_service_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
