"""Interception decisions: serve a request from the blob store or forward it."""

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from offline_videos.constants import DEFAULT_VIDEO_MIME
from offline_videos.interceptor.resolver import AddressResolver
from offline_videos.models.schemas import VideoRecord
from offline_videos.utils.logging import LogContext, get_logger
from offline_videos.utils.metrics import metrics

logger = get_logger(__name__)

READ_ONLY_METHODS = frozenset({"GET"})


class Outcome(str, enum.Enum):
    """Where a request ended up in the interception state machine."""

    UNMATCHED = "unmatched"
    MATCHED = "matched"
    PARSE_FAILED = "parse_failed"
    LOOKUP_MISS = "lookup_miss"
    LOOKUP_HIT = "lookup_hit"
    LOOKUP_ERROR = "lookup_error"


class VideoLookup(Protocol):
    """Read side of a store client."""

    async def get_downloaded_video(self, video_id: int) -> VideoRecord | None: ...

    async def close(self) -> None: ...


@dataclass(frozen=True)
class Serve:
    """Answer the request with a stored record."""

    record: VideoRecord
    outcome: Outcome = Outcome.LOOKUP_HIT

    def to_response(self, request: httpx.Request, default_mime: str = DEFAULT_VIDEO_MIME) -> httpx.Response:
        """Build a response whose body is the stored blob."""
        blob = self.record.blob
        headers = {
            "Content-Type": blob.content_type or default_mime,
            "Content-Length": str(blob.size),
        }
        return httpx.Response(200, headers=headers, content=blob.data, request=request)


@dataclass(frozen=True)
class Forward:
    """Send the request to the network unchanged."""

    outcome: Outcome


Decision = Serve | Forward

NetworkHandler = Callable[[httpx.Request], Awaitable[httpx.Response]]


def classify(request: httpx.Request, resolver: AddressResolver) -> tuple[Outcome, int | None]:
    """Match a request against the cacheable video pattern.

    Returns:
        (UNMATCHED, None), (PARSE_FAILED, None) or (MATCHED, key)
    """
    if request.method not in READ_ONLY_METHODS or not resolver.matches(request.url):
        return Outcome.UNMATCHED, None
    key = resolver.resolve(request.url)
    if key is None:
        return Outcome.PARSE_FAILED, None
    return Outcome.MATCHED, key


class RequestInterceptor:
    """Answers eligible requests from the blob store, forwards everything else.

    Caching is best-effort: a failing lookup never fails the request, it only
    sends it to the network.
    """

    def __init__(
        self,
        store: VideoLookup,
        resolver: AddressResolver,
        default_mime: str = DEFAULT_VIDEO_MIME,
    ):
        self.store = store
        self.resolver = resolver
        self.default_mime = default_mime

    async def decide(self, request: httpx.Request) -> Decision:
        """Decide how to answer a request. Never raises."""
        outcome, key = classify(request, self.resolver)
        if outcome is not Outcome.MATCHED:
            return Forward(outcome)

        log = LogContext(logger, url=str(request.url))
        try:
            record = await self.store.get_downloaded_video(key)
        except Exception as e:
            log.warning(f"Lookup of video {key} failed, using network: {e}")
            return Forward(Outcome.LOOKUP_ERROR)

        if record is None or not record.blob.data:
            log.debug(f"Video {key} not stored, fetching from network")
            return Forward(Outcome.LOOKUP_MISS)

        log.info(f"Serving video '{record.title}' from store")
        return Serve(record)

    async def respond(self, request: httpx.Request, forward: NetworkHandler) -> httpx.Response:
        """Produce the response for a request.

        Network errors raised by ``forward`` propagate to the caller.
        """
        decision = await self.decide(request)
        if decision.outcome is not Outcome.UNMATCHED:
            metrics.interceptor_requests_total.inc(outcome=decision.outcome.value)
        if isinstance(decision, Serve):
            return decision.to_response(request, self.default_mime)
        return await forward(request)

    async def aclose(self) -> None:
        """Release the store handle."""
        await self.store.close()
