"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from offline_videos.api import api_router, blob_router
from offline_videos.config import get_settings
from offline_videos.exceptions import (
    AlreadyDownloaded,
    NetworkFetchError,
    OfflineVideoError,
    ReadError,
    StoreUnavailable,
    VideoNotFound,
    WriteError,
)
from offline_videos.interceptor import create_interceptor, worker_registry
from offline_videos.interceptor.resolver import VideoPathResolver
from offline_videos.services import BlobUrlRegistry, CatalogClient, Player, VideoLibrary
from offline_videos.store import StoreClient, StoreConfig
from offline_videos.utils.http_client import (
    close_all_clients,
    get_download_client,
    get_general_client,
)
from offline_videos.utils.logging import get_logger, setup_logging
from offline_videos.utils.metrics import MetricsMiddleware, metrics

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup: the UI context owns the store schema
    store = StoreClient(StoreConfig.from_settings(settings, owns_schema=True))
    try:
        await store.open_db()
        logger.info(f"Blob store {settings.store_name} v{settings.store_version} opened")
    except StoreUnavailable as e:
        logger.error(f"Blob store unavailable, downloads will fail: {e}")

    app.state.worker = worker_registry.register(
        settings.worker_scope,
        lambda: create_interceptor(settings),
    )
    app.state.library = VideoLibrary(
        store=store,
        catalog=CatalogClient(settings.catalog_url, get_general_client()),
        http=get_download_client(),
        player=Player(BlobUrlRegistry()),
        resolver=VideoPathResolver(settings.video_base_url),
    )

    yield

    logger.info("Shutting down...")
    await app.state.library.aclose()
    await worker_registry.unregister_all()
    await close_all_clients()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=APP_VERSION,
    lifespan=lifespan,
)

# Middleware (order matters - first added = last executed)
app.add_middleware(MetricsMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=500)

# The catalog is open to any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Routers
app.include_router(api_router)
app.include_router(blob_router)


_ERROR_STATUS: list[tuple[type[OfflineVideoError], int]] = [
    (StoreUnavailable, 503),
    (NetworkFetchError, 502),
    (AlreadyDownloaded, 409),
    (VideoNotFound, 404),
    (ReadError, 500),
    (WriteError, 500),
]


@app.exception_handler(OfflineVideoError)
async def offline_video_error_handler(request: Request, exc: OfflineVideoError) -> JSONResponse:
    """Turn library failures into user-visible notices."""
    status_code = next(
        (code for exc_type, code in _ERROR_STATUS if isinstance(exc, exc_type)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Store app start time for uptime tracking
_app_start_time = datetime.now(UTC)


@app.get("/health", include_in_schema=True, tags=["monitoring"])
async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for monitoring.

    Returns:
        JSONResponse with status, uptime, and store/interceptor checks.
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": (datetime.now(UTC) - _app_start_time).total_seconds(),
        "version": APP_VERSION,
        "checks": {},
    }

    library = getattr(request.app.state, "library", None)
    try:
        if library is None:
            raise StoreUnavailable("Library not initialized")
        await library.store.open_db()
        health_status["checks"]["store"] = {"status": "healthy"}
    except StoreUnavailable:
        health_status["checks"]["store"] = {"status": "unhealthy"}
        health_status["status"] = "degraded"

    installed = getattr(request.app.state, "worker", None) is not None
    health_status["checks"]["interceptor"] = {"status": "healthy" if installed else "unhealthy"}
    if not installed:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/metrics", include_in_schema=True, tags=["monitoring"])
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns:
        Prometheus-formatted metrics text.
    """
    return Response(
        content=metrics.format_prometheus(),
        media_type="text/plain; charset=utf-8",
    )
