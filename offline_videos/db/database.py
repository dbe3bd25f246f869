"""Database engine creation for the blob store."""

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from offline_videos.constants import STORE_BUSY_TIMEOUT, STORE_JOURNAL_MODE


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    """Apply per-connection SQLite settings."""
    cursor = dbapi_connection.cursor()
    cursor.execute(f"PRAGMA busy_timeout={int(STORE_BUSY_TIMEOUT * 1000)}")
    cursor.execute(f"PRAGMA journal_mode={STORE_JOURNAL_MODE}")
    cursor.close()


def ensure_store_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database.

    Raises:
        OSError: If the directory cannot be created
    """
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def create_store_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for a blob store database."""
    engine = create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"timeout": STORE_BUSY_TIMEOUT},
    )
    event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
    return engine
