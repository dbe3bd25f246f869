"""Catalog API endpoint."""

from fastapi import APIRouter

from offline_videos.constants import DEFAULT_CATALOG
from offline_videos.models.schemas import CatalogEntry

router = APIRouter()


@router.get("", response_model=list[CatalogEntry])
async def list_videos() -> list[CatalogEntry]:
    """List every video of the catalog. No pagination."""
    return [CatalogEntry(**video) for video in DEFAULT_CATALOG]
