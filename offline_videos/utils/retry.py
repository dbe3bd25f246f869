"""Retry with exponential backoff for network fetches."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    retryable_exceptions: tuple = (
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.ReadError,
        ConnectionError,
        TimeoutError,
    )
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)

    def delay(self, attempt: int) -> float:
        """Backoff before the next attempt."""
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_async(
    func: Callable[..., Awaitable[httpx.Response]],
    *args: Any,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    operation_name: str = "operation",
    **kwargs: Any,
) -> httpx.Response:
    """Execute an HTTP call with retry logic and exponential backoff.

    Args:
        func: Async function returning an httpx.Response
        *args: Positional arguments for the function
        config: Retry configuration
        operation_name: Name of the operation for logging
        **kwargs: Keyword arguments for the function

    Returns:
        The last response, which may still carry a retryable status

    Raises:
        The last retryable exception once attempts are exhausted, or any
        non-retryable exception immediately
    """
    attempts = config.max_retries + 1
    attempt = 0

    while True:
        last_attempt = attempt >= config.max_retries
        try:
            response = await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if last_attempt:
                logger.error(f"{operation_name}: Failed after {attempts} attempts: {e}")
                raise
            logger.warning(
                f"{operation_name}: {type(e).__name__}, "
                f"retrying in {config.delay(attempt):.1f}s (attempt {attempt + 1}/{attempts})"
            )
        else:
            if response.status_code not in config.retryable_status_codes or last_attempt:
                return response
            logger.warning(
                f"{operation_name}: Got status {response.status_code}, "
                f"retrying in {config.delay(attempt):.1f}s (attempt {attempt + 1}/{attempts})"
            )
        await asyncio.sleep(config.delay(attempt))
        attempt += 1
