"""
Resolver settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once and cached.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Resolver settings loaded from environment variables.

    Every variable is prefixed with PROFILE_RESOLVER_ (e.g.
    PROFILE_RESOLVER_MAX_RETRIES) and may also be set in a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROFILE_RESOLVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Remote profile API ===
    profiles_url: str = Field(
        default="https://api.mojang.com/profiles/minecraft",
        description="Batch endpoint resolving up to 100 names per POST",
    )
    name_history_url: str = Field(
        default="https://api.mojang.com/user/profiles/{uuid}/names",
        description="Per-id name history endpoint; {uuid} is replaced by the dashless id",
    )
    max_retries: int = Field(
        default=5,
        ge=0,
        description="Retries per HTTP request after the first attempt",
    )
    retry_delay_ms: int = Field(
        default=50,
        ge=0,
        description="Delay after the first failed request in milliseconds, doubling each retry",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Socket timeout per HTTP request in seconds",
    )

    # === Parallel lookups ===
    parallel_threads: int = Field(
        default=4,
        ge=1,
        description="Worker threads used for batch lookups",
    )
    profiles_per_job: int = Field(
        default=100,
        ge=1,
        description="Upper bound of keys resolved by one worker job",
    )

    # === Cache and local sources ===
    cache_path: Path | None = Field(
        default=None,
        description="SQLite cache file; an in-memory cache is used when unset",
    )
    case_sensitive_names: bool = Field(
        default=False,
        description="Treat names differing only in case as different keys when combining sources",
    )
    player_registry: str | None = Field(
        default=None,
        description="Optional module:attribute path of a host player registry",
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        description="TRACE, DEBUG, INFO, WARNING or ERROR",
    )

    @property
    def retry_delay(self) -> float:
        """Retry delay in seconds."""
        return self.retry_delay_ms / 1000

    @field_validator("name_history_url", mode="after")
    @classmethod
    def validate_name_history_url(cls, v: str) -> str:
        """Require the {uuid} placeholder in the name history URL."""
        if "{uuid}" not in v:
            raise ValueError(f"Invalid NAME_HISTORY_URL: {v}. Must contain '{{uuid}}'")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log_level."""
        v = v.upper()
        if v not in ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return v

    @field_validator("cache_path", "player_registry", mode="before")
    @classmethod
    def empty_as_none(cls, v: object) -> object:
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the process.
    """
    return Settings()
