"""
Centralized settings configuration using Pydantic BaseSettings.

Part of HYG-21: Engine configuration

All environment variables are defined here with types, defaults, and validation.
Use get_settings() wherever the composition root needs configuration.

Usage:
    from backend.settings import get_settings, Settings

    settings = get_settings()
    print(settings.profile_store_path)

    # Tests build their own instance without reading .env
    settings = Settings(environment="test", _env_file=None)
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
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
    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )

    # -------------------------------------------------------------------------
    # Plan Provider - OpenAI
    # -------------------------------------------------------------------------
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key; without it every session runs on fallbacks",
    )
    plan_provider_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used for plans, substitutions and debriefs",
    )
    plan_provider_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for one plan provider call, retries included",
    )
    plan_provider_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per plan provider call on transient errors",
    )

    # -------------------------------------------------------------------------
    # Session Defaults
    # -------------------------------------------------------------------------
    default_session_minutes: int = Field(
        default=45,
        ge=1,
        description="Session duration requested when the caller gives none",
    )
    default_focus_hint: str = Field(
        default="full body",
        description="Session focus requested when the caller gives none",
    )
    tick_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between two clock ticks",
    )

    # -------------------------------------------------------------------------
    # Profile Storage
    # -------------------------------------------------------------------------
    profile_store_path: str = Field(
        default="./data/profiles.json",
        description="JSON file holding the athlete profiles",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
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
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level '{v}'")
        return level

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    @property
    def plan_provider_enabled(self) -> bool:
        """An AI plan provider is used only when an API key is configured."""
        return bool(self.openai_api_key)


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
