"""Configuration module using Pydantic Settings."""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Attributes:
        host: Host address for the server.
        port: Port number for the server.
        registry_url: Base URL of the npm-compatible registry.
        registry_timeout: Timeout in seconds for a single registry call.
        registry_retries: Connection retries for registry calls.
        max_concurrency: Maximum number of registry calls in flight.
        resolve_timeout: Optional time budget for a whole resolution.
        cache_max_entries: Optional bound on cached responses (LRU).
        cache_ttl_seconds: Optional lifetime of a cached response.
        cors_origins: Allowed CORS origins.
        debug: Enable debug mode.
        log_level: Root log level.
        log_format: "text" or "json".
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="server_host", description="Server host address")
    port: int = Field(default=3000, alias="server_port", description="Server port")

    # Registry Configuration
    registry_url: str = Field(
        default="https://registry.npmjs.org",
        description="Base URL of the package registry",
    )
    registry_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for a single registry call",
    )
    registry_retries: int = Field(
        default=2,
        ge=0,
        description="Connection retries for registry calls",
    )

    # Resolution Configuration
    max_concurrency: int = Field(
        default=32,
        ge=1,
        description="Maximum number of registry calls in flight",
    )
    resolve_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Time budget in seconds for a whole resolution (unbounded if unset)",
    )

    # Response Cache Configuration
    cache_max_entries: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of cached responses (unbounded if unset)",
    )
    cache_ttl_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Lifetime of a cached response (no expiry if unset)",
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="List of allowed CORS origins",
    )

    # Debug / Logging
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format",
    )

    @field_validator("registry_url", mode="before")
    @classmethod
    def clean_registry_url(cls, v: str) -> str:
        if not isinstance(v, str):
            return v
        return v.strip().rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        if not isinstance(v, str):
            return v
        return v.strip().upper()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
