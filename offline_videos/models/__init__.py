"""Storage container definition and schemas."""

from offline_videos.models.schemas import (
    Blob,
    CatalogEntry,
    DownloadRead,
    LibraryEntry,
    PlaybackRead,
    VideoRecord,
)
from offline_videos.models.video import video_container

__all__ = [
    "Blob",
    "CatalogEntry",
    "DownloadRead",
    "LibraryEntry",
    "PlaybackRead",
    "VideoRecord",
    "video_container",
]
