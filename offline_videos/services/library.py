"""Video library: catalog listing, downloads and playback for the UI context."""

import httpx

from offline_videos.exceptions import (
    AlreadyDownloaded,
    NetworkFetchError,
    OfflineVideoError,
    VideoNotFound,
)
from offline_videos.interceptor.resolver import AddressResolver
from offline_videos.models.schemas import Blob, CatalogEntry, LibraryEntry, VideoRecord
from offline_videos.services.catalog import CatalogClient
from offline_videos.services.playback import PlaybackHandle, Player
from offline_videos.store import StoreClient
from offline_videos.utils.logging import LogContext, get_logger
from offline_videos.utils.metrics import metrics

logger = get_logger(__name__)


class VideoLibrary:
    """Everything the viewer does with the catalog.

    Usage:
        library = VideoLibrary(store, catalog, http, player, resolver)
        entries = await library.refresh()
        await library.download(entries[0].id)
        handle = await library.play(entries[0].id)
    """

    def __init__(
        self,
        store: StoreClient,
        catalog: CatalogClient,
        http: httpx.AsyncClient,
        player: Player,
        resolver: AddressResolver | None = None,
    ):
        """Initialize the library.

        Args:
            store: Schema-owning store client
            catalog: Catalog API client
            http: Client used to download videos
            player: Player holding the current playback handle
            resolver: Interceptor resolver, used to warn when a catalog id
                and its URL numbering disagree
        """
        self.store = store
        self.catalog = catalog
        self.http = http
        self.player = player
        self.resolver = resolver
        self.entries: dict[int, CatalogEntry] = {}
        self.downloaded: dict[int, bool] = {}

    async def refresh(self) -> list[LibraryEntry]:
        """Fetch the catalog and the download status of every entry.

        Raises:
            NetworkFetchError: If the catalog cannot be fetched
        """
        entries = await self.catalog.fetch()
        self.entries = {entry.id: entry for entry in entries}

        try:
            stored = await self.store.downloaded_ids()
        except OfflineVideoError as e:
            logger.error(f"Error checking download status: {e}")
            stored = set()
        self.downloaded = {entry.id: entry.id in stored for entry in entries}

        return self.listing()

    def listing(self) -> list[LibraryEntry]:
        """Catalog entries with their last known download status."""
        return [
            LibraryEntry(**entry.model_dump(), downloaded=self.downloaded.get(entry.id, False))
            for entry in self.entries.values()
        ]

    async def entry(self, video_id: int) -> CatalogEntry:
        """Get a catalog entry, fetching the catalog on first use.

        Raises:
            VideoNotFound: If the id is not in the catalog
        """
        if not self.entries:
            await self.refresh()
        entry = self.entries.get(video_id)
        if entry is None:
            raise VideoNotFound(video_id)
        return entry

    async def check_if_downloaded(self, video_id: int) -> bool:
        """Refresh and return the download status of one video."""
        try:
            downloaded = await self.store.get_downloaded_video(video_id) is not None
        except OfflineVideoError as e:
            logger.error(f"Error checking download status for video ID {video_id}: {e}")
            downloaded = False
        self.downloaded[video_id] = downloaded
        return downloaded

    async def download(self, video_id: int) -> VideoRecord:
        """Fetch a video from the network and store it for offline playback.

        The download status only changes once the record is stored.

        Raises:
            VideoNotFound: If the id is not in the catalog
            AlreadyDownloaded: If the video is already stored
            NetworkFetchError: If the video cannot be fetched
            StoreUnavailable: If the store cannot be opened
            WriteError: If the record cannot be written
        """
        entry = await self.entry(video_id)
        if self.downloaded.get(video_id):
            raise AlreadyDownloaded(entry.id, entry.title)

        log = LogContext(logger, video=str(entry.id))
        log.info(f"Attempting to download: {entry.title} from {entry.url}")
        self._check_key_alignment(entry)

        try:
            record = await self._fetch(entry)
            await self.store.save_video(record)
        except OfflineVideoError as e:
            log.error(f"Error during download process for {entry.title}: {e}")
            metrics.downloads_total.inc(status="failed")
            raise

        self.downloaded[video_id] = True
        metrics.downloads_total.inc(status="succeeded")
        log.info(f"{entry.title} downloaded and saved ({record.blob.size} bytes)")
        return record

    async def _fetch(self, entry: CatalogEntry) -> VideoRecord:
        try:
            response = await self.http.get(entry.url)
        except httpx.HTTPError as e:
            raise NetworkFetchError(entry.url, str(e)) from e

        if not response.is_success:
            raise NetworkFetchError(entry.url, f"Failed to fetch video: {response.reason_phrase}")
        if not response.content:
            raise NetworkFetchError(entry.url, "Empty response body")

        return VideoRecord(
            id=entry.id,
            title=entry.title,
            blob=Blob(
                data=response.content,
                content_type=response.headers.get("content-type", ""),
            ),
            original_url=entry.url,
        )

    def _check_key_alignment(self, entry: CatalogEntry) -> None:
        """Warn when the interceptor would look this video up under another key."""
        if self.resolver is None:
            return
        url = httpx.URL(entry.url)
        if not self.resolver.matches(url):
            logger.warning(
                f"{entry.url} is not an interceptable video address; "
                f"video {entry.id} will only play offline from the library"
            )
            return
        key = self.resolver.resolve(url)
        if key != entry.id:
            logger.warning(
                f"Catalog id {entry.id} does not match key {key} parsed from {entry.url}; "
                "requests for this address will not be served from the store"
            )

    async def play(self, video_id: int) -> PlaybackHandle:
        """Start playback, offline when the video is stored, online otherwise.

        The previous playback handle is released first.

        Raises:
            VideoNotFound: If the id is not in the catalog
        """
        entry = await self.entry(video_id)
        self.player.close()

        try:
            record = await self.store.get_downloaded_video(video_id)
        except OfflineVideoError as e:
            logger.error(f"Error preparing video for playback, playing online: {e}")
            return self.player.play_online(entry)

        if record is not None and record.blob.data:
            return self.player.play_offline(record)
        return self.player.play_online(entry)

    def close_player(self) -> None:
        """Stop playback and release its handle."""
        self.player.close()

    async def aclose(self) -> None:
        """Tear down: release playback and the store handle."""
        self.player.close()
        await self.store.close()
