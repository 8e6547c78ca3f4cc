"""
Configuration and settings for the rental backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Key-value profile store (Postgres expected)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # Hosted auth service (Supabase)
    supabase_url: Optional[str] = Field(default=None, env="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, env="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, env="SUPABASE_ANON_KEY")

    # S3-compatible storage for avatars
    storage_endpoint: Optional[str] = Field(default=None, env="STORAGE_ENDPOINT")
    storage_region: Optional[str] = Field(default=None, env="STORAGE_REGION")
    storage_bucket: Optional[str] = Field(default=None, env="STORAGE_BUCKET")
    aws_access_key_id: Optional[str] = Field(
        default=None, env="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, env="AWS_SECRET_ACCESS_KEY"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "RENTAL_USE_IN_MEMORY_BACKENDS", "use_in_memory_backends"
        ),
    )

    # Notifications (Redis)
    redis_url: Optional[str] = Field(default=None, env="REDIS_URL")
    redis_notifications_key: str = Field(
        default="rental:notifications", env="REDIS_NOTIFICATIONS_KEY"
    )
    notifications_max_items: int = Field(default=100)

    # Booking lifecycle sweep
    lifecycle_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("RENTAL_LIFECYCLE_ENABLED", "lifecycle_enabled"),
    )
    lifecycle_interval_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "RENTAL_LIFECYCLE_INTERVAL_SECONDS", "lifecycle_interval_seconds"
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
