"""Blob URL endpoint used by the player for offline playback."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response

from offline_videos.api.dependencies import get_blob_urls
from offline_videos.config import get_settings
from offline_videos.services import BlobUrlRegistry

router = APIRouter()


@router.get("/{token}")
async def get_blob(
    token: str,
    urls: Annotated[BlobUrlRegistry, Depends(get_blob_urls)],
) -> Response:
    """Serve a blob while its URL has not been revoked."""
    blob = urls.get(token)
    if blob is None:
        raise HTTPException(status_code=404, detail="Blob URL revoked or unknown")
    return Response(
        content=blob.data,
        media_type=blob.content_type or get_settings().default_video_mime,
    )
