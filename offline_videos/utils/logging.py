"""Logging setup for the store, interceptor and library."""

import logging
import sys
from typing import Any

from offline_videos.config import get_settings

# Per-connection chatter from the HTTP and SQLite stacks
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger.

    Args:
        level: Log level name, defaults to the LOG_LEVEL setting
    """
    level = (level or get_settings().log_level).upper()

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.root.level))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext(logging.LoggerAdapter):
    """Logger that prefixes every message with ``[key=value]`` pairs.

    Usage:
        log = LogContext(logger, video=str(entry.id))
        log.info("Downloaded")  # "[video=1] Downloaded"
    """

    def __init__(self, logger: logging.Logger, **context: str) -> None:
        super().__init__(logger, context)
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"{self.prefix} {msg}", kwargs
