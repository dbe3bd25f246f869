"""Playback handles for stored blobs.

A player addresses a stored blob through an ephemeral URL. The URL keeps the
blob alive until it is revoked, so every handle must be released when
playback stops, switches video, or the player is torn down.
"""

import secrets
from dataclasses import dataclass

from offline_videos.constants import BLOB_URL_PREFIX
from offline_videos.models.schemas import Blob, CatalogEntry, VideoRecord
from offline_videos.utils.logging import get_logger
from offline_videos.utils.metrics import metrics

logger = get_logger(__name__)


class BlobUrlRegistry:
    """Ephemeral URLs for blobs, served under ``/blob/{token}``."""

    def __init__(self) -> None:
        self._blobs: dict[str, Blob] = {}

    def create(self, blob: Blob) -> str:
        """Register a blob and return its URL."""
        token = secrets.token_urlsafe(16)
        self._blobs[token] = blob
        metrics.playback_handles_active.inc()
        return f"{BLOB_URL_PREFIX}{token}"

    def revoke(self, url: str) -> None:
        """Release a blob URL. Unknown URLs are ignored."""
        if not url.startswith(BLOB_URL_PREFIX):
            return
        if self._blobs.pop(url[len(BLOB_URL_PREFIX):], None) is not None:
            metrics.playback_handles_active.dec()

    def get(self, token: str) -> Blob | None:
        """Get the blob behind a token, if still registered."""
        return self._blobs.get(token)

    def __len__(self) -> int:
        return len(self._blobs)


@dataclass
class PlaybackHandle:
    """What a player is currently showing."""

    video_id: int
    title: str
    src: str
    offline: bool
    _registry: BlobUrlRegistry | None = None

    def release(self) -> None:
        """Revoke the blob URL. Safe to call more than once."""
        if self._registry is not None:
            self._registry.revoke(self.src)
            self._registry = None


class Player:
    """Holds at most one playback handle at a time.

    Usage:
        async with Player(urls) as player:
            handle = player.play_offline(record)
            ...
        # handle released on exit
    """

    def __init__(self, urls: BlobUrlRegistry):
        self.urls = urls
        self.current: PlaybackHandle | None = None

    def play_offline(self, record: VideoRecord) -> PlaybackHandle:
        """Play a stored record through a fresh blob URL."""
        self.close()
        self.current = PlaybackHandle(
            video_id=record.id,
            title=record.title,
            src=self.urls.create(record.blob),
            offline=True,
            _registry=self.urls,
        )
        logger.info(f"Playing offline: {record.title} ({self.current.src})")
        return self.current

    def play_online(self, entry: CatalogEntry) -> PlaybackHandle:
        """Play a catalog entry from its network address."""
        self.close()
        self.current = PlaybackHandle(
            video_id=entry.id,
            title=entry.title,
            src=entry.url,
            offline=False,
        )
        logger.info(f"Playing online: {entry.title} ({entry.url})")
        return self.current

    def close(self) -> None:
        """Stop playback and release the current handle."""
        if self.current is not None:
            self.current.release()
            self.current = None

    async def __aenter__(self) -> "Player":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
