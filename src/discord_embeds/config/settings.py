"""
Module: settings.py
Description: Library configuration using pydantic-settings.

Reads optional overrides from DISCORD_EMBEDS_* environment variables (and a
.env file for local development). Every field has a default so the package
works with no environment at all.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from discord_embeds import __version__


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DISCORD_EMBEDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging settings
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(default="json", description="Log renderer: json or console")

    # HTTP settings
    request_timeout: float = Field(
        default=10.0,
        ge=1,
        le=120,
        description="HTTP timeout in seconds for a single webhook POST"
    )
    connect_timeout: float = Field(
        default=5.0,
        gt=0,
        le=120,
        description="Connect timeout in seconds"
    )
    user_agent: str = Field(
        default=f"discord-embeds/{__version__}",
        min_length=1,
        description="User-Agent header sent with every webhook POST"
    )

    # Rate limit settings
    rate_limit_max_attempts: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum POST attempts while rate limited (unset = no limit)"
    )
    rate_limit_max_wait: Optional[float] = Field(
        default=None,
        ge=0,
        description="Maximum total seconds to pause while rate limited (unset = no limit)"
    )
    rate_limit_jitter: float = Field(
        default=0.0,
        ge=0,
        description="Random extra seconds (0..jitter) added to each rate limit pause"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is a known renderer."""
        if v.lower() not in ('json', 'console'):
            raise ValueError("log_format must be one of: json, console")
        return v.lower()


# Global settings instance
settings = Settings()
