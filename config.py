"""
Configuration settings for quizbank.

Uses Pydantic Settings for environment variable management with .env file support.
Only the process wiring (CLI, scripts) reads these; core components take
every value as an explicit parameter.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quizbank.store.config import DEFAULT_CHUNK_SIZE, MAX_COMMIT_WRITES, question_collection_path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Tenant & Storage
    # ========================================
    tenant_id: str = Field(
        default="default_app",
        description="Tenant (app) id; scopes the question collection path",
    )
    database_url: str = Field(
        default="sqlite:///quizbank.db",
        description="SQLAlchemy URL of the document store database",
    )
    sync_poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Seconds between change checks for live subscriptions",
    )

    # ========================================
    # Upload
    # ========================================
    upload_chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        le=MAX_COMMIT_WRITES,
        description="Questions per atomic commit during upload",
    )

    # ========================================
    # Identity
    # ========================================
    identity_backend: Literal["local", "identity_toolkit"] = Field(
        default="local",
        description="Identity provider: offline local ids or the hosted REST service",
    )
    identity_api_key: str | None = Field(
        default=None,
        description="Web API key for the hosted identity service",
    )
    identity_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Hosted identity service base URL",
    )
    identity_timeout_seconds: float = Field(
        default=10.0,
        description="Identity request timeout",
    )
    initial_auth_token: str | None = Field(
        default=None,
        description="Custom sign-in token handed over by the host; anonymous sign-in when unset",
    )

    # ========================================
    # Role Gate
    # ========================================
    conductor_secret: str | None = Field(
        default=None,
        description="Secret phrase unlocking the conductor role (unset disables it)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @field_validator("tenant_id")
    @classmethod
    def _check_tenant_id(cls, value: str) -> str:
        value = value.strip()
        if not value or "/" in value:
            raise ValueError("tenant_id must be a non-empty path segment")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    # ========================================
    # Helper Methods
    # ========================================
    @property
    def questions_collection_path(self) -> str:
        """Tenant-scoped question collection path."""
        return question_collection_path(self.tenant_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
