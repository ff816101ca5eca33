"""Environment-based settings for formwire.

Settings are read from environment variables with the ``FORMWIRE_`` prefix,
or from a ``.env`` file in the working directory.

Example:
    >>> # FORMWIRE_LOG_LEVEL=DEBUG
    >>> # FORMWIRE_DISPATCH_DEPTH_WARNING=8
    >>> settings = get_settings()
    >>> settings.dispatch_depth_warning
    8
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["FormwireSettings", "get_settings"]


class FormwireSettings(BaseSettings):
    """Process-wide formwire settings."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format: 'json' or 'console'")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")
    dispatch_depth_warning: int = Field(
        default=32,
        ge=1,
        description="Nested change-dispatch depth at which a warning is logged",
    )
    log_validation_failures: bool = Field(
        default=False,
        description="Log every failing validation report at DEBUG level",
    )

    model_config = SettingsConfigDict(
        env_prefix="FORMWIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate format is a known value."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()


# Global settings instance (loaded on first access)
_settings: Optional[FormwireSettings] = None


def get_settings(reload: bool = False) -> FormwireSettings:
    """Get the global formwire settings.

    Args:
        reload: Force reload from the environment.
    """
    global _settings
    if _settings is None or reload:
        _settings = FormwireSettings()
    return _settings
