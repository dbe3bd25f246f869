"""httpx transport that routes every outgoing request through the interceptor."""

import httpx

from offline_videos.constants import POOL_KEEPALIVE_EXPIRY, POOL_MAX_CONNECTIONS, POOL_MAX_KEEPALIVE
from offline_videos.interceptor.decision import RequestInterceptor


class InterceptingTransport(httpx.AsyncBaseTransport):
    """Wraps a network transport and lets the interceptor answer first.

    Usage:
        transport = InterceptingTransport(interceptor)
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.get("http://example.com/video1.mp4")
    """

    def __init__(
        self,
        interceptor: RequestInterceptor,
        network: httpx.AsyncBaseTransport | None = None,
    ):
        self.interceptor = interceptor
        self.network = network or httpx.AsyncHTTPTransport(
            limits=httpx.Limits(
                max_connections=POOL_MAX_CONNECTIONS,
                max_keepalive_connections=POOL_MAX_KEEPALIVE,
                keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
            ),
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self.interceptor.respond(request, self.network.handle_async_request)

    async def aclose(self) -> None:
        await self.network.aclose()
