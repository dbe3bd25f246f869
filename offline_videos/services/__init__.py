"""Services used by the UI context."""

from offline_videos.services.catalog import CatalogClient
from offline_videos.services.library import VideoLibrary
from offline_videos.services.playback import BlobUrlRegistry, PlaybackHandle, Player

__all__ = [
    "BlobUrlRegistry",
    "CatalogClient",
    "PlaybackHandle",
    "Player",
    "VideoLibrary",
]
