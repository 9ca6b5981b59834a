"""Application settings loaded from environment variables."""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackend(str, Enum):
    """Supported persistence backends."""

    MEMORY = "memory"
    REDIS = "redis"


class RetentionConfig(BaseModel):
    """Retention caps applied by the repository layer."""

    audit_log_max_entries: int = Field(default=1000, ge=1)
    """Most recent audit entries kept."""

    alert_max_entries: int = Field(default=1000, ge=1)
    """Most recent alerts kept."""

    report_max_entries: int = Field(default=100, ge=1)
    """Most recent recruitment reports kept."""


class BatchConfig(BaseModel):
    """Controls fixed-size batch processing of subjects."""

    batch_size: int = Field(default=10, ge=1)
    """Units processed per batch."""

    max_concurrency: int = Field(default=10, ge=1)
    """Upper bound on units in flight within a batch."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Storage
    storage_backend: StorageBackend = StorageBackend.MEMORY
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10
    storage_prefix: str = "talentwatch"

    # Privacy
    anonymizer_hash_salt: SecretStr = SecretStr("")
    analytics_fail_open: bool = False
    """Allow the demo analytics path to proceed when consent cannot be read."""

    # Scoring
    benchmark_jitter: float = Field(default=3.0, ge=0.0, le=3.0)
    benchmark_jitter_enabled: bool = False
    benchmark_seed: int | None = None

    # External talent registry
    registry_base_url: str = "https://registry.example.org/api/v1"
    registry_api_key: SecretStr | None = None
    registry_client_id: str = "talentwatch"
    registry_timeout_seconds: float = Field(default=10.0, gt=0)

    # Nested configuration
    retention: RetentionConfig = RetentionConfig()
    batching: BatchConfig = BatchConfig()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
