"""Configuration loading for the torneos service.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
- Support multiple environments (dev, staging, prod)
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from torneos.core.errors import ErrorDominio
from torneos.core.value_objects import UsuarioId


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Store configuration
    store_backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Torneo store backend type",
    )
    store_sqlite_path: str = Field(
        default="./data/torneos.db",
        description="SQLite database file path",
    )
    seed_categorias: bool = Field(
        default=True,
        description="Load the built-in categories at startup",
    )

    # HTTP API configuration
    http_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on for the HTTP API",
    )
    http_port: int = Field(
        default=8080,
        description="Port to listen on for the HTTP API",
    )
    api_key: str = Field(
        default="",
        description="API key for HTTP authentication (required for production)",
    )
    require_auth: bool = Field(
        default=False,
        description="Require API key authentication for API endpoints",
    )
    default_organizador_id: str = Field(
        default="test-organizador-id",
        description="Organizer used when a request does not name one",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Deployment stage
    stage: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment stage, included in startup logs",
    )

    @field_validator("http_port")
    @classmethod
    def validate_http_port(cls, v: int) -> int:
        """Ensure HTTP port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("http_port must be between 1 and 65535")
        return v

    @field_validator("default_organizador_id")
    @classmethod
    def validate_default_organizador_id(cls, v: str) -> str:
        """Ensure the default organizer is a valid UsuarioId."""
        try:
            return UsuarioId(v).valor
        except ErrorDominio as e:
            raise ValueError(f"default_organizador_id is invalid: {e}") from e


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
