"""Record container definition for the blob store."""

from sqlalchemy import Column, Integer, LargeBinary, MetaData, String, Table, Text


def video_container(name: str, metadata: MetaData | None = None) -> Table:
    """Build the table holding video records.

    One row per catalog id. The blob is stored whole alongside its content
    type and byte length so a reader never sees a record without its payload.
    """
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=False),
        Column("title", String(500), nullable=False),
        Column("blob", LargeBinary, nullable=False),
        Column("content_type", String(255), nullable=False, default=""),
        Column("size", Integer, nullable=False),
        Column("original_url", Text, nullable=False),
    )
