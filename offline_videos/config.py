"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from offline_videos.constants import DEFAULT_VIDEO_MIME


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_name: str = "Offline Videos"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Persistent blob store
    store_dir: Path = Path("data")
    store_name: str = "offlineVideosDB"
    store_version: int = 1
    store_container: str = "videos"

    @field_validator("store_version")
    @classmethod
    def validate_store_version(cls, v: int) -> int:
        """Schema versions start at 1 (0 marks a fresh database)."""
        if v < 1:
            raise ValueError("STORE_VERSION must be a positive integer")
        return v

    # Catalog and video delivery
    catalog_url: str = "http://localhost:8080/api/videos"
    video_base_url: str = "http://example.com"
    default_video_mime: str = DEFAULT_VIDEO_MIME

    # Request interceptor
    worker_scope: str = "/custom-service-worker.js"

    @property
    def store_url(self) -> str:
        """Get async SQLite URL of the blob store (sqlite+aiosqlite)."""
        return f"sqlite+aiosqlite:///{self.store_dir / f'{self.store_name}.sqlite3'}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
