"""
Core configuration module for the tool invoker.

This module provides centralized configuration management using Pydantic
Settings. All configuration is loaded from environment variables with the
TOOL_INVOKER_ prefix.

The resilience defaults (retry attempts, retry delay, rate-limit delay)
feed APIConfig.from_settings() so that networked tools share one
policy unless a tool overrides it.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the TOOL_INVOKER_ prefix for environment variables.
    Example: TOOL_INVOKER_DEFAULT_RETRY_ATTEMPTS=2
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="tool-invoker",
        description="Name of the service for logging and identification",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # HTTP Client Configuration
    # =========================================================================
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        description="Default timeout in seconds for networked tool requests",
    )
    max_connections: int = Field(
        default=100,
        ge=1,
        description="Maximum connections in the HTTP pool",
    )
    max_keepalive: int = Field(
        default=20,
        ge=0,
        description="Maximum keepalive connections in the HTTP pool",
    )
    user_agent: str = Field(
        default="tool-invoker/1.0",
        description="User-Agent header sent by networked tools",
    )

    # =========================================================================
    # Resilience Configuration
    # =========================================================================
    default_retry_attempts: int = Field(
        default=0,
        ge=0,
        le=20,
        description="Retries after the first attempt (0 disables retrying)",
    )
    default_retry_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Base backoff interval in milliseconds (linear backoff)",
    )
    default_rate_limit_delay_ms: int = Field(
        default=5000,
        ge=0,
        description="Fallback wait when a rate-limit response has no hint",
    )
    max_rate_limit_waits: Optional[int] = Field(
        default=10,
        ge=1,
        description="Cap on rate-limit waits per call (None for unbounded)",
    )

    model_config = {
        "env_prefix": "TOOL_INVOKER_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Field Validators
    # =========================================================================
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return upper


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
