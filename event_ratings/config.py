"""
Configuration and settings for the ratings backend.
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

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5001)
    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Full JSON body of the Firebase service-account key.
    service_account_json: Optional[str] = Field(default=None)

    # Firestore
    ratings_collection: str = Field(default="ratings")
    max_page_size: int = Field(default=100, ge=1)

    # Single-page app build output
    static_dir: str = Field(default="build")

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "EVENT_RATINGS_USE_IN_MEMORY_BACKENDS", "use_in_memory_backends"
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
