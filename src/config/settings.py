"""Application settings using Pydantic Settings.

Centralized configuration for the visa eligibility service.

Production requires the following environment variables:
- SUPABASE_PROJECT_ID (or SUPABASE_URL): Supabase project hosting auth and
  the assessment edge functions
- SUPABASE_ANON_KEY: Public anon key sent as the ``apikey`` header
"""

import sys
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SupabaseSettings(BaseSettings):
    """Supabase project hosting authentication and edge functions."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_id: str = Field(default="", description="Supabase project reference")
    anon_key: str = Field(default="", description="Public anon key")
    url: Optional[str] = Field(
        default=None,
        description="Full project URL; overrides the one derived from project_id",
    )
    functions_slug: str = Field(
        default="make-server-ca272e8b",
        description="Edge function that serves the assessment endpoints",
    )
    request_timeout: float = Field(default=60.0, description="HTTP timeout in seconds")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v

    @property
    def is_configured(self) -> bool:
        return bool(self.url or self.project_id)

    @property
    def base_url(self) -> str:
        """Get the project base URL."""
        if self.url:
            return self.url
        return f"https://{self.project_id}.supabase.co"

    @property
    def functions_url(self) -> str:
        return f"{self.base_url}/functions/v1/{self.functions_slug}"

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/auth/v1"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="UK Visa Eligibility", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment name")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # CORS
    cors_origins: list = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # Wizard sessions
    max_wizard_sessions: int = Field(
        default=1000,
        description="Maximum in-memory wizard sessions before the oldest are evicted",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("max_wizard_sessions")
    @classmethod
    def positive_session_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_wizard_sessions must be at least 1")
        return v

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment in ("production", "prod", "staging")

    def validate_production(self) -> List[str]:
        """
        Validate configuration required in production.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.is_production:
            return errors

        supabase = self.supabase
        if not supabase.is_configured:
            errors.append("SUPABASE_PROJECT_ID or SUPABASE_URL: Required in production")
        if not supabase.anon_key:
            errors.append("SUPABASE_ANON_KEY: Required in production")
        if self.debug:
            errors.append("APP_DEBUG: Must be False in production")
        if "*" in self.cors_origins:
            errors.append("APP_CORS_ORIGINS: Wildcard origin is not allowed in production")

        return errors


# =============================================================================
# STARTUP VALIDATION
# =============================================================================

class StartupConfigurationError(Exception):
    """Raised when configuration validation fails at startup."""
    pass


def validate_startup(settings: Settings, exit_on_failure: bool = True) -> bool:
    """
    Validate settings at application startup.

    In production this fails fast if required settings are missing.

    Args:
        settings: Application settings instance
        exit_on_failure: If True, exit the process on failure (default)

    Returns:
        True if validation passes

    Raises:
        StartupConfigurationError: If validation fails and exit_on_failure is False
    """
    errors = settings.validate_production()

    if not errors:
        if settings.is_production:
            logger.info("Production configuration validation PASSED")
        return True

    error_msg = "CONFIGURATION ERROR\n" + "\n".join(
        f"  {i}. {err}" for i, err in enumerate(errors, 1)
    )
    logger.critical(error_msg)

    if exit_on_failure:
        print(error_msg, file=sys.stderr)
        sys.exit(1)
    raise StartupConfigurationError(error_msg)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()


@lru_cache
def get_supabase_settings() -> SupabaseSettings:
    return SupabaseSettings()
