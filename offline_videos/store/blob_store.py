"""Persistent blob store for downloaded videos.

A single SQLite database holds one container (table) of video records keyed
by catalog id. Every execution context opens its own handle on the same file;
visibility between contexts comes from SQLite's transactions, nothing here
coordinates them.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

from sqlalchemy import inspect, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.schema import CreateTable

from offline_videos.config import Settings
from offline_videos.db import create_store_engine, ensure_store_directory
from offline_videos.exceptions import ReadError, SchemaMissing, StoreUnavailable, WriteError
from offline_videos.models.schemas import Blob, VideoRecord
from offline_videos.models.video import video_container
from offline_videos.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoreConfig:
    """Where a store lives and whether this handle may create its schema."""

    name: str
    version: int
    container: str
    url: str
    owns_schema: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, owns_schema: bool = False) -> "StoreConfig":
        """Build a config from application settings."""
        return cls(
            name=settings.store_name,
            version=settings.store_version,
            container=settings.store_container,
            url=settings.store_url,
            owns_schema=owns_schema,
        )


class BlobStore:
    """Keyed store of VideoRecord, durable across restarts.

    Usage:
        store = await BlobStore(config).open()
        await store.put(record)
        record = await store.get(1)
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._table = video_container(config.container)
        self._engine: AsyncEngine | None = None
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        """Check whether the handle has been opened."""
        return self._engine is not None

    async def open(self) -> "BlobStore":
        """Open the database, creating the container when this handle owns the schema.

        Idempotent: opening an open handle returns it unchanged, and concurrent
        first opens share one engine.

        Returns:
            The opened store handle

        Raises:
            StoreUnavailable: If persistent storage cannot be opened or the
                stored schema version is not the configured one
        """
        if self._engine is not None:
            return self

        async with self._open_lock:
            if self._engine is None:
                self._engine = await self._connect()
        return self

    async def _connect(self) -> AsyncEngine:
        try:
            ensure_store_directory(self.config.url)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create storage for {self.config.name}: {e}") from e

        engine = create_store_engine(self.config.url)
        try:
            async with engine.begin() as conn:
                stored_version = (await conn.execute(text("PRAGMA user_version"))).scalar_one()
                self._check_version(stored_version)
                if self.config.owns_schema:
                    await conn.execute(CreateTable(self._table, if_not_exists=True))
                    if stored_version == 0:
                        await conn.execute(text(f"PRAGMA user_version = {int(self.config.version)}"))
                        logger.info(
                            f"Created store {self.config.name} v{self.config.version} "
                            f"(container '{self.config.container}')"
                        )
        except StoreUnavailable:
            await engine.dispose()
            raise
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            raise StoreUnavailable(f"Cannot open store {self.config.name}: {e}") from e

        return engine

    def _check_version(self, stored_version: int) -> None:
        """Refuse databases written by another schema version."""
        if stored_version == 0 or stored_version == self.config.version:
            return
        if stored_version > self.config.version:
            raise StoreUnavailable(
                f"Store {self.config.name} is at version {stored_version}, "
                f"newer than {self.config.version}"
            )
        # TODO: add a migration step here once a version 2 schema exists.
        raise StoreUnavailable(
            f"Store {self.config.name} is at version {stored_version}, "
            f"no migration to {self.config.version}"
        )

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreUnavailable(f"Store {self.config.name} is not open")
        return self._engine

    async def _has_container(self, conn: AsyncConnection) -> bool:
        name = self._table.name
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table(name))

    async def put(self, record: VideoRecord) -> int:
        """Insert or overwrite a record in one transaction.

        Args:
            record: The record to store

        Returns:
            The record id

        Raises:
            WriteError: If the transaction fails
        """
        engine = self._require_engine()
        values = self._to_row(record)
        stmt = sqlite_insert(self._table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[self._table.c.id],
            set_={key: stmt.excluded[key] for key in values if key != "id"},
        )

        try:
            async with engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as e:
            raise WriteError(f"Error saving video {record.id}: {e}") from e

        logger.debug(f"Stored video {record.id} ({record.blob.size} bytes)")
        return record.id

    async def get(self, video_id: int) -> VideoRecord | None:
        """Get a full record, or None when absent.

        Raises:
            SchemaMissing: If the container does not exist yet
            ReadError: If the read fails
        """
        engine = self._require_engine()
        try:
            async with engine.connect() as conn:
                if not await self._has_container(conn):
                    raise SchemaMissing(f"Container '{self._table.name}' not found")
                result = await conn.execute(
                    select(self._table).where(self._table.c.id == video_id)
                )
                row = result.mappings().one_or_none()
        except SQLAlchemyError as e:
            raise ReadError(f"Error getting video {video_id}: {e}") from e

        if row is None:
            return None
        return self._to_record(row)

    async def keys(self) -> list[int]:
        """List the ids of all stored records.

        Raises:
            SchemaMissing: If the container does not exist yet
            ReadError: If the read fails
        """
        engine = self._require_engine()
        try:
            async with engine.connect() as conn:
                if not await self._has_container(conn):
                    raise SchemaMissing(f"Container '{self._table.name}' not found")
                result = await conn.execute(select(self._table.c.id).order_by(self._table.c.id))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise ReadError(f"Error listing videos: {e}") from e

    async def close(self) -> None:
        """Dispose the engine. The handle can be reopened."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    @staticmethod
    def _to_row(record: VideoRecord) -> dict[str, Any]:
        return {
            "id": record.id,
            "title": record.title,
            "blob": record.blob.data,
            "content_type": record.blob.content_type,
            "size": record.blob.size,
            "original_url": record.original_url,
        }

    @staticmethod
    def _to_record(row: Any) -> VideoRecord:
        return VideoRecord(
            id=row["id"],
            title=row["title"],
            blob=Blob(data=row["blob"], content_type=row["content_type"]),
            original_url=row["original_url"],
        )
