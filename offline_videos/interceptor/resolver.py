"""Mapping from network addresses to blob store keys."""

import re
from typing import Protocol

import httpx


class AddressResolver(Protocol):
    """Decides which addresses are cacheable and which key they map to."""

    def matches(self, url: httpx.URL) -> bool:
        """Check whether the address has the shape of a cacheable video."""
        ...

    def resolve(self, url: httpx.URL) -> int | None:
        """Get the store key for a matching address, or None if it cannot be parsed."""
        ...


def _address(url: httpx.URL) -> str:
    """Address without query string or fragment."""
    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.path}"


class VideoPathResolver:
    """Resolver for ``<base>/video<N>.mp4`` addresses.

    ``<N>`` is used directly as the VideoRecord id. Catalog ids and file
    numbering are assumed to agree; nothing checks it here.
    """

    def __init__(self, base_url: str | None = None):
        """Initialize the resolver.

        Args:
            base_url: Address prefix videos are served under. When None, any
                origin and directory is accepted.
        """
        # httpx lowercases scheme and host, so compare against its rendering
        self.base_url = str(httpx.URL(base_url)).rstrip("/") if base_url else None
        prefix = re.escape(self.base_url) if self.base_url else r"[a-z][a-z0-9+.\-]*://[^/]+(?:/[^?#]*)?"
        self._pattern = re.compile(rf"^{prefix}/video(\d+)\.mp4$")

    def matches(self, url: httpx.URL) -> bool:
        return self._pattern.match(_address(url)) is not None

    def resolve(self, url: httpx.URL) -> int | None:
        match = self._pattern.match(_address(url))
        if match is None:
            return None
        digits = match.group(1)
        # Positive decimal without leading zeros
        if digits.startswith("0"):
            return None
        return int(digits)
