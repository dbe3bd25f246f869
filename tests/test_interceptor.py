"""Tests for request matching, interception decisions and installation."""

import httpx
import pytest

from offline_videos.exceptions import ReadError, SchemaMissing
from offline_videos.interceptor import (
    Forward,
    InterceptingTransport,
    Outcome,
    Registration,
    RequestInterceptor,
    Serve,
    VideoPathResolver,
    WorkerRegistry,
    classify,
)
from offline_videos.models.schemas import VideoRecord
from offline_videos.store import StoreClient
from offline_videos.utils.metrics import metrics

from tests.helpers import BASE_URL, VIDEO_BYTES, RecordingNetwork, unreachable


class FakeLookup:
    """In-memory store client."""

    def __init__(self, records: dict[int, VideoRecord] | None = None, error: Exception | None = None):
        self.records = records or {}
        self.error = error
        self.lookups: list[int] = []
        self.closed = False

    async def get_downloaded_video(self, video_id: int) -> VideoRecord | None:
        self.lookups.append(video_id)
        if self.error is not None:
            raise self.error
        return self.records.get(video_id)

    async def close(self) -> None:
        self.closed = True


def get(url: str) -> httpx.Request:
    return httpx.Request("GET", url)


class TestVideoPathResolver:
    """Tests for address matching and key parsing."""

    @pytest.mark.parametrize(
        "url,key",
        [
            (f"{BASE_URL}/video1.mp4", 1),
            (f"{BASE_URL}/video42.mp4", 42),
            (f"{BASE_URL}/video7.mp4?t=30", 7),
            (f"{BASE_URL}/video7.mp4#start", 7),
        ],
    )
    def test_matching_addresses(self, url: str, key: int):
        resolver = VideoPathResolver(BASE_URL)
        assert resolver.matches(httpx.URL(url))
        assert resolver.resolve(httpx.URL(url)) == key

    @pytest.mark.parametrize(
        "url",
        [
            f"{BASE_URL}/image1.png",
            f"{BASE_URL}/video1.webm",
            f"{BASE_URL}/videos/video1.mp4",
            f"{BASE_URL}/videoX.mp4",
            "http://other.example.org/video1.mp4",
        ],
    )
    def test_non_matching_addresses(self, url: str):
        resolver = VideoPathResolver(BASE_URL)
        assert not resolver.matches(httpx.URL(url))
        assert resolver.resolve(httpx.URL(url)) is None

    @pytest.mark.parametrize("url", [f"{BASE_URL}/video0.mp4", f"{BASE_URL}/video01.mp4"])
    def test_unparseable_numbers(self, url: str):
        """Zero and leading zeros match the shape but do not yield a key."""
        resolver = VideoPathResolver(BASE_URL)
        assert resolver.matches(httpx.URL(url))
        assert resolver.resolve(httpx.URL(url)) is None

    def test_trailing_slash_in_base(self):
        resolver = VideoPathResolver(f"{BASE_URL}/")
        assert resolver.resolve(httpx.URL(f"{BASE_URL}/video3.mp4")) == 3

    def test_base_host_is_case_insensitive(self):
        """Requests carry a lowercased host, whatever case the base was configured in."""
        resolver = VideoPathResolver("HTTP://Example.COM/Media")
        assert resolver.resolve(httpx.URL("http://example.com/Media/video4.mp4")) == 4
        assert not resolver.matches(httpx.URL("http://example.com/media/video4.mp4"))

    def test_any_origin_without_base(self):
        resolver = VideoPathResolver()
        assert resolver.resolve(httpx.URL("https://cdn.test/media/video5.mp4")) == 5
        assert not resolver.matches(httpx.URL("https://cdn.test/media/image5.png"))


class TestClassify:
    """Tests for the pure matching step."""

    def test_matched(self):
        assert classify(get(f"{BASE_URL}/video2.mp4"), VideoPathResolver(BASE_URL)) == (
            Outcome.MATCHED,
            2,
        )

    def test_other_method_unmatched(self):
        request = httpx.Request("POST", f"{BASE_URL}/video2.mp4")
        assert classify(request, VideoPathResolver(BASE_URL)) == (Outcome.UNMATCHED, None)

    def test_other_address_unmatched(self):
        assert classify(get(f"{BASE_URL}/image1.png"), VideoPathResolver(BASE_URL)) == (
            Outcome.UNMATCHED,
            None,
        )

    def test_parse_failed(self):
        assert classify(get(f"{BASE_URL}/video0.mp4"), VideoPathResolver(BASE_URL)) == (
            Outcome.PARSE_FAILED,
            None,
        )


class TestDecide:
    """Tests for RequestInterceptor.decide with an injected lookup."""

    @pytest.mark.asyncio
    async def test_hit_serves_record(self, make_record):
        record = make_record(video_id=3)
        interceptor = RequestInterceptor(FakeLookup({3: record}), VideoPathResolver(BASE_URL))

        decision = await interceptor.decide(get(f"{BASE_URL}/video3.mp4"))

        assert isinstance(decision, Serve)
        assert decision.record == record
        assert decision.outcome is Outcome.LOOKUP_HIT

    @pytest.mark.asyncio
    async def test_miss_forwards(self):
        lookup = FakeLookup()
        interceptor = RequestInterceptor(lookup, VideoPathResolver(BASE_URL))

        decision = await interceptor.decide(get(f"{BASE_URL}/video3.mp4"))

        assert decision == Forward(Outcome.LOOKUP_MISS)
        assert lookup.lookups == [3]

    @pytest.mark.parametrize(
        "error",
        [SchemaMissing("no container"), ReadError("disk"), RuntimeError("boom")],
    )
    @pytest.mark.asyncio
    async def test_lookup_errors_are_absorbed(self, error: Exception):
        interceptor = RequestInterceptor(FakeLookup(error=error), VideoPathResolver(BASE_URL))

        decision = await interceptor.decide(get(f"{BASE_URL}/video3.mp4"))

        assert decision == Forward(Outcome.LOOKUP_ERROR)

    @pytest.mark.asyncio
    async def test_unmatched_does_no_lookup(self):
        lookup = FakeLookup()
        interceptor = RequestInterceptor(lookup, VideoPathResolver(BASE_URL))

        decision = await interceptor.decide(get(f"{BASE_URL}/image1.png"))

        assert decision == Forward(Outcome.UNMATCHED)
        assert lookup.lookups == []

    @pytest.mark.asyncio
    async def test_parse_failure_does_no_lookup(self):
        lookup = FakeLookup()
        interceptor = RequestInterceptor(lookup, VideoPathResolver(BASE_URL))

        decision = await interceptor.decide(get(f"{BASE_URL}/video01.mp4"))

        assert decision == Forward(Outcome.PARSE_FAILED)
        assert lookup.lookups == []


class TestServeResponse:
    """Tests for responses synthesized from stored blobs."""

    def test_headers_from_blob(self, make_record):
        request = get(f"{BASE_URL}/video1.mp4")
        response = Serve(make_record(content_type="video/webm")).to_response(request)

        assert response.status_code == 200
        assert response.headers["content-type"] == "video/webm"
        assert response.headers["content-length"] == str(len(VIDEO_BYTES))
        assert response.content == VIDEO_BYTES

    def test_default_content_type(self, make_record):
        request = get(f"{BASE_URL}/video1.mp4")
        response = Serve(make_record(content_type="")).to_response(request)

        assert response.headers["content-type"] == "video/mp4"


class TestInterceptingTransport:
    """Tests for the transport that observes every outgoing request."""

    @pytest.mark.asyncio
    async def test_hit_never_touches_network(self, make_record):
        """A stored video is served while the network is unreachable."""
        network = RecordingNetwork(unreachable)
        record = make_record(video_id=1)
        transport = InterceptingTransport(
            RequestInterceptor(FakeLookup({1: record}), VideoPathResolver(BASE_URL)),
            network=network,
        )

        response = await transport.handle_async_request(get(f"{BASE_URL}/video1.mp4"))

        assert response.content == record.blob.data
        assert network.requests == []

    @pytest.mark.asyncio
    async def test_miss_forwards_original_request_once(self):
        network = RecordingNetwork()
        transport = InterceptingTransport(
            RequestInterceptor(FakeLookup(), VideoPathResolver(BASE_URL)),
            network=network,
        )
        request = get(f"{BASE_URL}/video9.mp4")

        response = await transport.handle_async_request(request)

        assert response.content == b"from-network"
        assert len(network.requests) == 1
        assert network.requests[0] is request

    @pytest.mark.parametrize(
        "method,url",
        [
            ("GET", f"{BASE_URL}/image1.png"),
            ("POST", f"{BASE_URL}/video1.mp4"),
            ("HEAD", f"{BASE_URL}/video1.mp4"),
        ],
    )
    @pytest.mark.asyncio
    async def test_ineligible_requests_pass_through(self, make_record, method: str, url: str):
        """Other methods and addresses reach the network untouched, without lookup."""
        network = RecordingNetwork()
        lookup = FakeLookup({1: make_record(video_id=1)})
        transport = InterceptingTransport(
            RequestInterceptor(lookup, VideoPathResolver(BASE_URL)),
            network=network,
        )
        request = httpx.Request(method, url)

        await transport.handle_async_request(request)

        assert network.requests == [request]
        assert network.requests[0] is request
        assert lookup.lookups == []

    @pytest.mark.asyncio
    async def test_lookup_error_falls_back_to_network(self):
        network = RecordingNetwork()
        transport = InterceptingTransport(
            RequestInterceptor(FakeLookup(error=ReadError("locked")), VideoPathResolver(BASE_URL)),
            network=network,
        )
        request = get(f"{BASE_URL}/video1.mp4")

        response = await transport.handle_async_request(request)

        assert response.status_code == 200
        assert network.requests == [request]

    @pytest.mark.asyncio
    async def test_network_failure_on_fallback_propagates(self):
        """After a miss, network errors reach the caller unchanged."""
        transport = InterceptingTransport(
            RequestInterceptor(FakeLookup(), VideoPathResolver(BASE_URL)),
            network=RecordingNetwork(unreachable),
        )

        with pytest.raises(httpx.ConnectError):
            await transport.handle_async_request(get(f"{BASE_URL}/video1.mp4"))

    @pytest.mark.asyncio
    async def test_outcomes_are_counted(self, make_record):
        transport = InterceptingTransport(
            RequestInterceptor(FakeLookup({1: make_record()}), VideoPathResolver(BASE_URL)),
            network=RecordingNetwork(),
        )
        hits = metrics.interceptor_requests_total.get(outcome="lookup_hit")
        misses = metrics.interceptor_requests_total.get(outcome="lookup_miss")

        await transport.handle_async_request(get(f"{BASE_URL}/video1.mp4"))
        await transport.handle_async_request(get(f"{BASE_URL}/video2.mp4"))

        assert metrics.interceptor_requests_total.get(outcome="lookup_hit") == hits + 1
        assert metrics.interceptor_requests_total.get(outcome="lookup_miss") == misses + 1


class TestWithStore:
    """Interception against real store handles."""

    @pytest.mark.asyncio
    async def test_fresh_environment_forwards(self, worker_store: StoreClient):
        """No container yet: the request goes to the network without an error."""
        network = RecordingNetwork()
        interceptor = RequestInterceptor(worker_store, VideoPathResolver(BASE_URL))
        transport = InterceptingTransport(interceptor, network=network)
        request = get(f"{BASE_URL}/video2.mp4")

        store = await worker_store.open_db()
        with pytest.raises(SchemaMissing):
            await store.get(2)

        response = await transport.handle_async_request(request)

        assert response.status_code == 200
        assert network.requests == [request]

    @pytest.mark.asyncio
    async def test_saved_video_is_served(
        self, ui_store: StoreClient, registration: Registration, network: RecordingNetwork, make_record
    ):
        """A video saved by the UI context is served through the installed client."""
        record = make_record(video_id=1)
        await ui_store.save_video(record)

        response = await registration.client.get(f"{BASE_URL}/video1.mp4")

        assert response.status_code == 200
        assert response.content == record.blob.data
        assert response.headers["content-type"] == "video/mp4"
        assert network.requests == []

    @pytest.mark.asyncio
    async def test_unsaved_video_goes_to_network(
        self, ui_store: StoreClient, registration: Registration, network: RecordingNetwork
    ):
        await ui_store.open_db()

        response = await registration.client.get(f"{BASE_URL}/video3.mp4")

        assert response.content == b"from-network"
        assert len(network.requests) == 1


class TestWorkerRegistry:
    """Tests for installing the interceptor once per scope."""

    @pytest.mark.asyncio
    async def test_register_is_idempotent(self):
        registry = WorkerRegistry()
        built: list[RequestInterceptor] = []

        def factory() -> RequestInterceptor:
            interceptor = RequestInterceptor(FakeLookup(), VideoPathResolver(BASE_URL))
            built.append(interceptor)
            return interceptor

        try:
            first = registry.register("/custom-service-worker.js", factory, network=RecordingNetwork())
            second = registry.register("/custom-service-worker.js", factory, network=RecordingNetwork())

            assert first is second
            assert len(built) == 1
            assert registry.get("/custom-service-worker.js") is first
        finally:
            await registry.unregister_all()

    @pytest.mark.asyncio
    async def test_unregister_closes_store(self):
        registry = WorkerRegistry()
        lookup = FakeLookup()
        registry.register(
            "/sw.js",
            lambda: RequestInterceptor(lookup, VideoPathResolver(BASE_URL)),
            network=RecordingNetwork(),
        )

        assert await registry.unregister("/sw.js") is True
        assert lookup.closed
        assert registry.get("/sw.js") is None
        assert await registry.unregister("/sw.js") is False
