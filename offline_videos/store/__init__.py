"""Persistent storage of downloaded videos.

Usage:
    from offline_videos.store import StoreClient, StoreConfig

    ui_store = StoreClient(StoreConfig.from_settings(settings, owns_schema=True))
    worker_store = StoreClient(StoreConfig.from_settings(settings))

    await ui_store.save_video(record)
    record = await worker_store.get_downloaded_video(record.id)
"""

from offline_videos.store.blob_store import BlobStore, StoreConfig
from offline_videos.store.client import StoreClient

__all__ = [
    "BlobStore",
    "StoreClient",
    "StoreConfig",
]
