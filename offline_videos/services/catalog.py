"""Catalog API client."""

import httpx
from pydantic import TypeAdapter, ValidationError

from offline_videos.constants import CATALOG_MAX_RETRIES
from offline_videos.exceptions import NetworkFetchError
from offline_videos.models.schemas import CatalogEntry
from offline_videos.utils.logging import get_logger
from offline_videos.utils.retry import RetryConfig, retry_async

logger = get_logger(__name__)

_catalog_adapter = TypeAdapter(list[CatalogEntry])


class CatalogClient:
    """Fetches the list of available videos.

    The catalog is not persisted; it is fetched again every session.
    """

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient,
        retry_config: RetryConfig | None = None,
    ):
        self.url = url
        self.client = client
        self.retry_config = retry_config or RetryConfig(max_retries=CATALOG_MAX_RETRIES)

    async def fetch(self) -> list[CatalogEntry]:
        """Fetch all catalog entries.

        Raises:
            NetworkFetchError: If the catalog cannot be fetched or parsed
        """
        try:
            response = await retry_async(
                self.client.get,
                self.url,
                config=self.retry_config,
                operation_name="catalog fetch",
            )
        except httpx.HTTPError as e:
            raise NetworkFetchError(self.url, str(e)) from e

        if not response.is_success:
            raise NetworkFetchError(self.url, "Network response was not ok")

        try:
            entries = _catalog_adapter.validate_json(response.content)
        except ValidationError as e:
            raise NetworkFetchError(self.url, f"Invalid catalog payload: {e}") from e

        logger.debug(f"Fetched {len(entries)} catalog entries from {self.url}")
        return entries
