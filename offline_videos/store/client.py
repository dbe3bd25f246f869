"""Store client shared by the UI context and the interception context."""

from offline_videos.exceptions import SchemaMissing, WriteError
from offline_videos.models.schemas import VideoRecord
from offline_videos.store.blob_store import BlobStore, StoreConfig
from offline_videos.utils.logging import get_logger

logger = get_logger(__name__)


class StoreClient:
    """Thin operation wrapper over one BlobStore handle.

    Each context builds its own client from the same configuration. Only the
    client constructed with ``owns_schema=True`` creates the container; the
    other one reports a missing container as "not downloaded".
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._store = BlobStore(config)

    @property
    def owns_schema(self) -> bool:
        return self.config.owns_schema

    async def open_db(self) -> BlobStore:
        """Open (or reuse) the underlying store handle."""
        return await self._store.open()

    async def save_video(self, record: VideoRecord) -> int:
        """Store a downloaded video, overwriting any previous copy.

        Raises:
            StoreUnavailable: If the store cannot be opened
            WriteError: If this client may not write or the write fails
        """
        if not self.owns_schema:
            raise WriteError("Only the schema-owning store client may save videos")
        store = await self.open_db()
        return await store.put(record)

    async def get_downloaded_video(self, video_id: int) -> VideoRecord | None:
        """Get a downloaded video, or None when it is not stored.

        Raises:
            StoreUnavailable: If the store cannot be opened
            ReadError: If the read fails
        """
        store = await self.open_db()
        try:
            return await store.get(video_id)
        except SchemaMissing:
            if self.owns_schema:
                raise
            logger.debug(
                f"Container '{self.config.container}' not created yet, "
                f"treating video {video_id} as not downloaded"
            )
            return None

    async def downloaded_ids(self) -> set[int]:
        """Get the ids of every stored video."""
        store = await self.open_db()
        try:
            return set(await store.keys())
        except SchemaMissing:
            if self.owns_schema:
                raise
            return set()

    async def close(self) -> None:
        """Release the store handle."""
        await self._store.close()
