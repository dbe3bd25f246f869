"""API routers."""

from offline_videos.api.router import api_router, blob_router

__all__ = [
    "api_router",
    "blob_router",
]
