"""Configuration management for sheet-calc.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SHEET_CALC_ prefix, or via a .env file in the project root.

Environment Variables:
    SHEET_CALC_MAX_RESOLUTION_DEPTH: Max nesting of formula references (default: 64)
    SHEET_CALC_CASCADE_ENABLED: Re-evaluate dependents after writes (default: true)
    SHEET_CALC_LOG_LEVEL: Logging level (default: INFO)
    SHEET_CALC_DEBUG: Enable debug mode (default: false)
    SHEET_CALC_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SHEET_CALC_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SHEET_CALC_SERVER_PORT: Server bind port (default: 8080)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        SHEET_CALC_LOG_LEVEL=DEBUG
        SHEET_CALC_MAX_RESOLUTION_DEPTH=128
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEET_CALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Calculation Settings
    # =========================================================================

    max_resolution_depth: int = 64
    """Maximum nesting of formula-to-formula references before failing."""

    cascade_enabled: bool = True
    """Re-evaluate cells referring to a written cell after each write."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional error details in responses."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8080
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_resolution_depth")
    @classmethod
    def validate_max_resolution_depth(cls, v: int) -> int:
        """Validate the resolution depth limit is reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(
                f"max_resolution_depth must be between 1 and 500, got {v}"
            )
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "max_resolution_depth": self.max_resolution_depth,
            "cascade_enabled": self.cascade_enabled,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Emits warnings for configurations that are legal but unusual and logs
    a configuration summary.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if not s.cascade_enabled:
        logger.warning(
            "Cascade re-evaluation is disabled. Writes will not report "
            "dependent cells that stop evaluating."
        )

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_resolution_depth={s.max_resolution_depth}, "
        f"cascade_enabled={s.cascade_enabled}"
    )


# Create the global settings instance
settings = Settings()
