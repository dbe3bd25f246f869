"""Shared persistent httpx clients for network fetches.

Using persistent clients avoids creating a new TCP connection + TLS handshake
for every fetch. The interceptor's client is owned by its registration, not
by this module.
"""

import httpx

from offline_videos.constants import (
    DOWNLOAD_TIMEOUT,
    HTTPX_TIMEOUT,
    POOL_KEEPALIVE_EXPIRY,
    POOL_MAX_CONNECTIONS,
    POOL_MAX_KEEPALIVE,
)

# Connection pool limits
_POOL_LIMITS = httpx.Limits(
    max_connections=POOL_MAX_CONNECTIONS,
    max_keepalive_connections=POOL_MAX_KEEPALIVE,
    keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
)

_general_client: httpx.AsyncClient | None = None
_download_client: httpx.AsyncClient | None = None


def get_general_client() -> httpx.AsyncClient:
    """Get persistent httpx client for short API calls (catalog)."""
    global _general_client
    if _general_client is None:
        _general_client = httpx.AsyncClient(
            timeout=HTTPX_TIMEOUT,
            limits=_POOL_LIMITS,
            http2=False,
        )
    return _general_client


def get_download_client() -> httpx.AsyncClient:
    """Get persistent httpx client for whole-video downloads."""
    global _download_client
    if _download_client is None:
        _download_client = httpx.AsyncClient(
            timeout=DOWNLOAD_TIMEOUT,
            limits=_POOL_LIMITS,
            follow_redirects=True,
            http2=False,
        )
    return _download_client


async def close_all_clients() -> None:
    """Close all persistent httpx clients. Call during app shutdown."""
    global _general_client, _download_client
    if _general_client is not None:
        await _general_client.aclose()
        _general_client = None
    if _download_client is not None:
        await _download_client.aclose()
        _download_client = None
