"""Library API endpoints: download status, downloads, playback and streaming."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Response

from offline_videos.api.dependencies import get_library, get_worker
from offline_videos.exceptions import NetworkFetchError
from offline_videos.interceptor import Registration
from offline_videos.models.schemas import DownloadRead, LibraryEntry, PlaybackRead
from offline_videos.services import VideoLibrary
from offline_videos.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("", response_model=list[LibraryEntry])
async def list_library(
    library: Annotated[VideoLibrary, Depends(get_library)],
) -> list[LibraryEntry]:
    """Fetch the catalog and report which videos are downloaded."""
    return await library.refresh()


@router.post("/{video_id}/download", response_model=DownloadRead, status_code=201)
async def download_video(
    video_id: int,
    library: Annotated[VideoLibrary, Depends(get_library)],
) -> DownloadRead:
    """Download a video for offline playback."""
    record = await library.download(video_id)
    return DownloadRead(
        id=record.id,
        title=record.title,
        size=record.blob.size,
        content_type=record.blob.content_type,
        message=f"{record.title} downloaded and saved successfully!",
    )


@router.post("/{video_id}/play", response_model=PlaybackRead)
async def play_video(
    video_id: int,
    library: Annotated[VideoLibrary, Depends(get_library)],
) -> PlaybackRead:
    """Start playback, from the store when downloaded."""
    handle = await library.play(video_id)
    return PlaybackRead(
        id=handle.video_id,
        title=handle.title,
        src=handle.src,
        offline=handle.offline,
    )


@router.delete("/player", status_code=204)
async def close_player(
    library: Annotated[VideoLibrary, Depends(get_library)],
) -> Response:
    """Close the player and release its blob URL."""
    library.close_player()
    return Response(status_code=204)


@router.get("/{video_id}/stream")
async def stream_video(
    video_id: int,
    library: Annotated[VideoLibrary, Depends(get_library)],
    worker: Annotated[Registration, Depends(get_worker)],
) -> Response:
    """Fetch a video address through the installed interceptor."""
    entry = await library.entry(video_id)
    try:
        upstream = await worker.client.get(entry.url)
    except httpx.HTTPError as e:
        logger.warning(f"Streaming video {video_id} from {entry.url} failed: {e}")
        raise NetworkFetchError(entry.url, str(e)) from e

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type"),
    )
