# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.MONGODB_URI)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# A missing MONGODB_URI is not an error here. The connection attempt at
# startup fails and is logged instead.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # MongoDB Configuration
    # -------------------------------------------------------------------------

    MONGODB_URI: str | None = Field(
        default=None,
        description="MongoDB connection string (e.g., mongodb://localhost:27017/app)"
    )

    MONGODB_DATABASE: str = Field(
        default="test",
        description="Database to use when the connection string names none"
    )

    MONGODB_COLLECTION: str = Field(
        default="users",
        description="Collection holding user documents"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------

    CORS_ALLOW_ALL_ORIGINS: bool = Field(
        default=True,
        description="Allow requests from any origin (CORS_ORIGINS is ignored when set)"
    )

    # Comma-separated string that gets parsed
    CORS_ORIGINS: str = Field(
        default="http://example1.com,http://example2.com",
        description="Allowed CORS origins when allow-all mode is off (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    RATE_LIMIT_WINDOW_MS: int = Field(
        default=60_000,
        ge=1,
        description="Length of the fixed rate-limit window in milliseconds"
    )

    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=50,
        ge=1,
        description="Requests allowed per client address within one window"
    )

    RATE_LIMIT_MESSAGE: str = Field(
        default="Too many requests, please try again later.",
        description="Body returned to throttled clients"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("CORS_ORIGINS")
    @classmethod
    def reject_wildcard_origin(cls, value: str) -> str:
        """
        Keep the allow-list literal.

        A "*" entry would make every other entry unreachable, so allow-all
        has its own flag.
        """
        if "*" in [origin.strip() for origin in value.split(",")]:
            raise ValueError(
                "CORS_ORIGINS must list literal origins; "
                "set CORS_ALLOW_ALL_ORIGINS=true to allow every origin"
            )
        return value

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://example1.com, http://example2.com" -> ["http://example1.com", "http://example2.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def rate_limit_window_seconds(self) -> float:
        """Window length in seconds, as used by the limiter clock."""
        return self.RATE_LIMIT_WINDOW_MS / 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
