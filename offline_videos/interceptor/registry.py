"""Installation of the request interceptor, once per delivery origin."""

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from offline_videos.config import Settings
from offline_videos.constants import DOWNLOAD_TIMEOUT
from offline_videos.interceptor.decision import RequestInterceptor
from offline_videos.interceptor.resolver import VideoPathResolver
from offline_videos.interceptor.transport import InterceptingTransport
from offline_videos.store import StoreClient, StoreConfig
from offline_videos.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Registration:
    """An installed interceptor and the client whose requests it observes."""

    scope: str
    interceptor: RequestInterceptor
    transport: InterceptingTransport
    client: httpx.AsyncClient = field(init=False)

    def __post_init__(self) -> None:
        self.client = httpx.AsyncClient(
            transport=self.transport,
            timeout=DOWNLOAD_TIMEOUT,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        """Close the client, its network transport and the store handle."""
        await self.client.aclose()
        await self.interceptor.aclose()


class WorkerRegistry:
    """Keeps at most one interceptor per scope.

    Registering a scope that is already installed returns the existing
    registration without calling the factory again.
    """

    def __init__(self) -> None:
        self._registrations: dict[str, Registration] = {}

    def register(
        self,
        scope: str,
        factory: Callable[[], RequestInterceptor],
        network: httpx.AsyncBaseTransport | None = None,
    ) -> Registration:
        """Install the interceptor built by ``factory`` for ``scope``."""
        existing = self._registrations.get(scope)
        if existing is not None:
            logger.debug(f"Interceptor already registered for {scope}")
            return existing

        interceptor = factory()
        registration = Registration(
            scope=scope,
            interceptor=interceptor,
            transport=InterceptingTransport(interceptor, network=network),
        )
        logger.info(f"Interceptor installed for {scope}")
        self._registrations[scope] = registration
        logger.info(f"Interceptor activated for {scope}")
        return registration

    def get(self, scope: str) -> Registration | None:
        """Get the registration for a scope, if any."""
        return self._registrations.get(scope)

    async def unregister(self, scope: str) -> bool:
        """Remove and close the registration for a scope."""
        registration = self._registrations.pop(scope, None)
        if registration is None:
            return False
        await registration.aclose()
        logger.info(f"Interceptor unregistered for {scope}")
        return True

    async def unregister_all(self) -> None:
        """Remove every registration. Call during app shutdown."""
        for scope in list(self._registrations):
            await self.unregister(scope)


def create_interceptor(settings: Settings) -> RequestInterceptor:
    """Build an interceptor with its own, non-owning store handle."""
    return RequestInterceptor(
        store=StoreClient(StoreConfig.from_settings(settings, owns_schema=False)),
        resolver=VideoPathResolver(settings.video_base_url),
        default_mime=settings.default_video_mime,
    )


# Global registry, one per process
worker_registry = WorkerRegistry()
