"""Database module."""

from offline_videos.db.database import (
    create_store_engine,
    ensure_store_directory,
)

__all__ = [
    "create_store_engine",
    "ensure_store_directory",
]
