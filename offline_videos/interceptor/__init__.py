"""Request interception for offline playback.

Every request sent through an installed interceptor's client is checked
against the video address pattern. Matching GET requests are answered from
the blob store when the video was downloaded; all others reach the network
untouched.

Usage:
    from offline_videos.interceptor import create_interceptor, worker_registry

    registration = worker_registry.register(
        settings.worker_scope, lambda: create_interceptor(settings)
    )
    response = await registration.client.get("http://example.com/video1.mp4")
"""

from offline_videos.interceptor.decision import (
    Decision,
    Forward,
    Outcome,
    RequestInterceptor,
    Serve,
    VideoLookup,
    classify,
)
from offline_videos.interceptor.registry import (
    Registration,
    WorkerRegistry,
    create_interceptor,
    worker_registry,
)
from offline_videos.interceptor.resolver import AddressResolver, VideoPathResolver
from offline_videos.interceptor.transport import InterceptingTransport

__all__ = [
    # Decision
    "Decision",
    "Forward",
    "Outcome",
    "RequestInterceptor",
    "Serve",
    "VideoLookup",
    "classify",
    # Resolver
    "AddressResolver",
    "VideoPathResolver",
    # Installation
    "InterceptingTransport",
    "Registration",
    "WorkerRegistry",
    "create_interceptor",
    "worker_registry",
]
