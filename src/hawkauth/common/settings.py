"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for services embedding Hawk authentication, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HAWK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Verification
    timestamp_skew_seconds: int = Field(
        default=60,
        description="Allowed clock drift (seconds) between client and server",
    )
    bewit_ttl_seconds: int = Field(
        default=60,
        description="Default lifetime (seconds) of generated bewits",
    )

    # Nonces
    nonce_bytes: int = Field(
        default=6,
        description="Random bytes in generated nonces (hex encoded)",
    )
    nonce_ttl_seconds: float = Field(
        default=120.0,
        description="How long seen nonces are remembered; should cover twice the skew",
    )
    nonce_max_entries: int = Field(
        default=10000,
        description="Max entries for the in-memory nonce cache",
    )
    nonce_storage: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Storage backend for the nonce cache",
    )
    nonce_sqlite_path: str = Field(
        default="data/nonces.sqlite",
        description="SQLite path for the nonce cache",
    )

    # Credentials
    credentials: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Mapping of Hawk id to {key, algorithm} (JSON)",
    )

    # Middleware
    auth_exempt_paths: tuple[str, ...] = Field(
        default=("/health", "/ready", "/metrics"),
        description="Paths exempt from Hawk authentication",
    )
    allow_bewit: bool = Field(
        default=True,
        description="Accept bewit query parameters on GET/HEAD requests",
    )
    sign_responses: bool = Field(
        default=False,
        description="Add a Server-Authorization header to authenticated responses",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON logs instead of console output",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
