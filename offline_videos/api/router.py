"""Main API router."""

from fastapi import APIRouter

from offline_videos.api.blobs import router as blobs_router
from offline_videos.api.catalog import router as catalog_router
from offline_videos.api.library import router as library_router

api_router = APIRouter(prefix="/api")

api_router.include_router(catalog_router, prefix="/videos", tags=["catalog"])
api_router.include_router(library_router, prefix="/library", tags=["library"])

blob_router = APIRouter()
blob_router.include_router(blobs_router, prefix="/blob", tags=["playback"])
