"""FastAPI dependencies resolving the application's long-lived components."""

from fastapi import HTTPException, Request

from offline_videos.interceptor import Registration
from offline_videos.services import BlobUrlRegistry, VideoLibrary


def get_library(request: Request) -> VideoLibrary:
    """Get the library created at startup."""
    library = getattr(request.app.state, "library", None)
    if library is None:
        raise HTTPException(status_code=503, detail="Library not initialized")
    return library


def get_blob_urls(request: Request) -> BlobUrlRegistry:
    """Get the registry of blob URLs handed to the player."""
    return get_library(request).player.urls


def get_worker(request: Request) -> Registration:
    """Get the installed interceptor registration."""
    worker = getattr(request.app.state, "worker", None)
    if worker is None:
        raise HTTPException(status_code=503, detail="Interceptor not installed")
    return worker
