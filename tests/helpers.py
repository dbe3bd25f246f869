"""Shared test data and network doubles."""

from collections.abc import Callable

import httpx

BASE_URL = "http://example.com"

CATALOG = [
    {"id": 1, "title": "Intro", "url": f"{BASE_URL}/video1.mp4"},
    {"id": 2, "title": "Data Structures", "url": f"{BASE_URL}/video2.mp4"},
]

# First bytes of an MP4 file
VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"


class RecordingNetwork(httpx.AsyncBaseTransport):
    """Stand-in for the network that records every request it receives."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []
        self.handler = handler or (
            lambda request: httpx.Response(
                200, content=b"from-network", headers={"Content-Type": "video/mp4"}
            )
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def unreachable(request: httpx.Request) -> httpx.Response:
    """Network handler failing every request."""
    raise httpx.ConnectError("Network unreachable", request=request)


def video_server(request: httpx.Request) -> httpx.Response:
    """Remote video host: serves video1/video2, 404 otherwise."""
    if request.url.path in ("/video1.mp4", "/video2.mp4"):
        return httpx.Response(200, content=VIDEO_BYTES, headers={"Content-Type": "video/mp4"})
    return httpx.Response(404)
