# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for backend selection, connection strings, cache
namespace/expiry and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Document store ===
    document_backend: Literal["mongodb", "memory"] = "memory"
    mongodb_uri: str = ""
    mongodb_database: str = "books"
    mongodb_timeout_ms: int = 5000

    # === Cache ===
    cache_backend: Literal["redis", "memory"] = "memory"
    redis_url: str = ""
    cache_namespace: str = "books"
    cache_default_ttl: int | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("cache_default_ttl")
    @classmethod
    def validate_ttl(cls, v: int | None) -> int | None:  # noqa: N805
        """Expiry must be a positive number of seconds."""
        if v is not None and v <= 0:
            raise ValueError("cache_default_ttl must be > 0")
        return v

    @field_validator("cache_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:  # noqa: N805
        if not v or any(c in v for c in ":*?[]\\"):
            raise ValueError(
                "cache_namespace must be non-empty and contain none of : * ? [ ] \\"
            )
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate that each selected backend has its connection string."""
        errors: list[str] = []

        if self.document_backend == "mongodb" and not self.mongodb_uri:
            errors.append("DOCUMENT_BACKEND=mongodb requires MONGODB_URI")

        if self.cache_backend == "redis" and not self.redis_url:
            errors.append("CACHE_BACKEND=redis requires REDIS_URL")

        if self.mongodb_timeout_ms <= 0:
            errors.append("MONGODB_TIMEOUT_MS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or scripts).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
