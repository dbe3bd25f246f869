"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from dataclasses import replace

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from offline_videos.interceptor import (
    Registration,
    RequestInterceptor,
    VideoPathResolver,
    WorkerRegistry,
)
from offline_videos.main import app
from offline_videos.models.schemas import Blob, VideoRecord
from offline_videos.services import BlobUrlRegistry, CatalogClient, Player, VideoLibrary
from offline_videos.store import StoreClient, StoreConfig
from offline_videos.utils.retry import RetryConfig

from tests.helpers import BASE_URL, CATALOG, VIDEO_BYTES, RecordingNetwork, video_server


@pytest.fixture
def make_record() -> Callable[..., VideoRecord]:
    """Factory for valid video records."""

    def _make(
        video_id: int = 1,
        title: str = "Intro",
        data: bytes = VIDEO_BYTES,
        content_type: str = "video/mp4",
    ) -> VideoRecord:
        return VideoRecord(
            id=video_id,
            title=title,
            blob=Blob(data=data, content_type=content_type),
            original_url=f"{BASE_URL}/video{video_id}.mp4",
        )

    return _make


@pytest.fixture
def store_config(tmp_path) -> StoreConfig:
    """Schema-owning config of a store in a fresh temporary directory."""
    return StoreConfig(
        name="offlineVideosDB",
        version=1,
        container="videos",
        url=f"sqlite+aiosqlite:///{tmp_path / 'offlineVideosDB.sqlite3'}",
        owns_schema=True,
    )


@pytest_asyncio.fixture
async def ui_store(store_config: StoreConfig) -> AsyncGenerator[StoreClient, None]:
    """Store client of the UI context (creates the container)."""
    client = StoreClient(store_config)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def worker_store(store_config: StoreConfig) -> AsyncGenerator[StoreClient, None]:
    """Store client of the interception context (never creates the container)."""
    client = StoreClient(replace(store_config, owns_schema=False))
    yield client
    await client.close()


@pytest.fixture
def network() -> RecordingNetwork:
    """Network answering every request with a small video."""
    return RecordingNetwork()


@pytest_asyncio.fixture
async def registration(
    worker_store: StoreClient, network: RecordingNetwork
) -> AsyncGenerator[Registration, None]:
    """Interceptor installed in a private registry over the recording network."""
    registry = WorkerRegistry()
    installed = registry.register(
        "/custom-service-worker.js",
        lambda: RequestInterceptor(worker_store, VideoPathResolver(BASE_URL)),
        network=network,
    )
    yield installed
    await registry.unregister_all()


@pytest_asyncio.fixture
async def library(ui_store: StoreClient) -> AsyncGenerator[VideoLibrary, None]:
    """Library over a mocked catalog API and video host."""
    catalog_http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=CATALOG))
    )
    download_http = httpx.AsyncClient(transport=httpx.MockTransport(video_server))
    await ui_store.open_db()

    lib = VideoLibrary(
        store=ui_store,
        catalog=CatalogClient(
            "http://catalog.test/api/videos",
            catalog_http,
            retry_config=RetryConfig(max_retries=0),
        ),
        http=download_http,
        player=Player(BlobUrlRegistry()),
        resolver=VideoPathResolver(BASE_URL),
    )
    yield lib

    lib.close_player()
    await catalog_http.aclose()
    await download_http.aclose()


@pytest_asyncio.fixture
async def client(
    library: VideoLibrary, registration: Registration
) -> AsyncGenerator[AsyncClient, None]:
    """Test client of the app with library and interceptor wired in."""
    app.state.library = library
    app.state.worker = registration

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    del app.state.library
    del app.state.worker


@pytest_asyncio.fixture
async def bare_client() -> AsyncGenerator[AsyncClient, None]:
    """Test client of the app before startup wiring."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
