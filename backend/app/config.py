"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Publish mode is chosen here, once per deployment

Design Decisions:
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Optional REDIS_URL / KAFKA_BROKERS: without them the service runs with the
      no-op cache and a log-only publisher
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.domain_types import PublishMode


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://items:items@db:5432/items"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Cache
    redis_url: str | None = None
    redis_pool_size: int = 10
    redis_pool_timeout_seconds: float = 30.0
    redis_connect_timeout_seconds: float = 1.0
    cache_ttl_seconds: float = Field(2.0, gt=0)

    # Read events
    kafka_brokers: str | None = None
    event_topic: str = "user-items-reads"
    publish_async: bool = False
    revision: str = Field(
        "", validation_alias=AliasChoices("k_revision", "revision"),
    )

    # Requests
    environment: str = Field(
        "dev", validation_alias=AliasChoices("app_env", "environment"),
    )
    request_timeout_seconds: float = Field(60.0, gt=0)
    max_id_length: int = 36
    max_name_length: int = 64

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def publish_mode(self) -> PublishMode:
        return PublishMode.ASYNC if self.publish_async else PublishMode.SYNC


@lru_cache
def get_settings() -> Settings:
    return Settings()
