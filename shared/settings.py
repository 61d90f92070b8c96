"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and
validation. Variables use the ``LIFTLOG_`` prefix, e.g. ``LIFTLOG_DATA_DIR``.

Usage:
    from shared.settings import get_settings

    settings = get_settings()
    print(settings.data_dir)
"""

from datetime import tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LIFTLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    data_dir: Path = Field(
        default=Path.home() / ".liftlog",
        description="Directory holding the active session and history files",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        description="Root logging level name",
    )

    # -------------------------------------------------------------------------
    # Session naming
    # -------------------------------------------------------------------------
    timezone: Optional[str] = Field(
        default=None,
        description="IANA time zone for time-of-day session names; unset uses the system zone",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is a standard logging level name."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Ensure the time zone name resolves; blank means unset."""
        if v is None or not v.strip():
            return None
        try:
            ZoneInfo(v.strip())
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone '{v}'") from e
        return v.strip()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    @property
    def local_tz(self) -> Optional[tzinfo]:
        """Configured time zone, or None for the system local zone."""
        return ZoneInfo(self.timezone) if self.timezone else None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
