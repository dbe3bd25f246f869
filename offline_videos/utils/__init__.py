"""Utility modules for the offline video service."""

from offline_videos.utils.logging import get_logger, LogContext, setup_logging
from offline_videos.utils.retry import retry_async, RetryConfig

__all__ = [
    # Logging
    "get_logger",
    "LogContext",
    "setup_logging",
    # Retry
    "retry_async",
    "RetryConfig",
]
