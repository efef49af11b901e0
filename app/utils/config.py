"""
Configuration management for Media Shelf.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API Configuration
    api_port: int = 8000
    log_level: str = "INFO"
    api_title: str = "Media Shelf API"
    api_version: str = "1.0.0"

    # Validation Configuration
    max_upload_bytes: int = 50 * 1024 * 1024
    document_types: str = "application/pdf"

    # Staging Simulation
    staging_tick_min_ms: int = 200
    staging_tick_jitter_ms: int = 300
    staging_max_increment: float = 15.0

    # Outcome feed
    outcome_history: int = 100

    # Inbox Configuration
    inbox_dir: Optional[Path] = None
    inbox_poll_seconds: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def get_document_types(self) -> frozenset[str]:
        """Parse document MIME types into a set."""
        return frozenset(
            t.strip().lower()
            for t in self.document_types.split(',')
            if t.strip()
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
