"""Centralized configuration management with environment-aware defaults.

This module implements the settings layer using Pydantic Settings, providing
type-safe defaults for the client and server pipelines that can be overridden
through environment variables or a ``.env`` file.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: ``SCHEMA_API_`` prefixed, ``__`` for nesting
- **Client defaults**: Base URL, default headers, retry delays and timeout
- **Server defaults**: Host, port and the CORS origin header value
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables (e.g. ``SCHEMA_API_CLIENT_CONFIG__BASE_URL``)
2. .env file in the working directory
3. Default values in model definitions
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schema_api.core.constants import DEFAULT_RETRY_DELAYS_MS


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class ClientDefaults(BaseModel):
    """Defaults applied to every API client."""

    base_url: str | None = Field(
        default=None,
        description="Base URL prepended to every resource path",
    )
    default_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every request (lowest priority)",
    )
    retry_delays_ms: list[int] = Field(
        default_factory=lambda: list(DEFAULT_RETRY_DELAYS_MS),
        description="Backoff delays before each retry of a 429/500 response",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout in seconds for an owned HTTP client",
    )

    @field_validator("retry_delays_ms", mode="after")
    @classmethod
    def validate_retry_delays(cls, v: list[int]) -> list[int]:
        """Reject negative backoff delays."""
        if any(delay < 0 for delay in v):
            msg = "Retry delays must be non-negative milliseconds"
            raise ValueError(msg)
        return v

    @field_validator("base_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class ServerDefaults(BaseModel):
    """Defaults applied to the API router and ``serve``."""

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8000, ge=0, le=65535, description="Bind port")
    cors_allow_origin: str = Field(
        default="*",
        description="Value of the Access-Control-Allow-Origin response header",
    )


class Settings(BaseSettings):
    """Main settings class for the toolkit."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the toolkit is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )
    client_config: ClientDefaults = Field(
        default_factory=ClientDefaults, description="Client defaults"
    )
    server_config: ServerDefaults = Field(
        default_factory=ServerDefaults, description="Server defaults"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._detect_formatter()

    def _detect_formatter(self) -> Literal["console", "json"]:
        """Auto-detect log formatter based on environment."""
        # Containers and cloud runtimes expect structured output
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"

        if self.environment == "development":
            return "console"
        return "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
