"""Exceptions raised by the blob store, the library and the download path."""


class OfflineVideoError(Exception):
    """Base exception for offline video errors."""

    pass


class StoreUnavailable(OfflineVideoError):
    """Persistent storage cannot be opened."""

    pass


class ReadError(OfflineVideoError):
    """Reading from the blob store failed."""

    pass


class SchemaMissing(ReadError):
    """The record container has not been created yet."""

    pass


class WriteError(OfflineVideoError):
    """Writing to the blob store failed."""

    pass


class NetworkFetchError(OfflineVideoError):
    """A remote fetch failed (connection error or non-success status)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class AlreadyDownloaded(OfflineVideoError):
    """The video is already stored locally."""

    def __init__(self, video_id: int, title: str):
        super().__init__(f"{title} is already downloaded.")
        self.video_id = video_id
        self.title = title


class VideoNotFound(OfflineVideoError):
    """No catalog entry exists for the given id."""

    def __init__(self, video_id: int):
        super().__init__(f"Video {video_id} is not in the catalog")
        self.video_id = video_id
