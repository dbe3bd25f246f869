"""Pydantic schemas for stored records, catalog entries and API payloads."""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# Stored records
class Blob(BaseModel):
    """Opaque binary payload with its content-type tag."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size(self) -> int:
        """Byte length of the payload."""
        return len(self.data)


class VideoRecord(BaseModel):
    """A downloaded video as kept in the blob store."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    title: str
    blob: Blob
    original_url: str

    @field_validator("blob")
    @classmethod
    def validate_blob_not_empty(cls, v: Blob) -> Blob:
        """Records are only ever written with content."""
        if not v.data:
            raise ValueError("blob must not be empty")
        return v


# Catalog schemas
class CatalogEntry(BaseModel):
    """A video listed by the catalog API."""

    id: int = Field(gt=0)
    title: str
    url: str


class LibraryEntry(CatalogEntry):
    """Catalog entry with its local download status."""

    downloaded: bool = False


class PlaybackRead(BaseModel):
    """What the player should load."""

    id: int
    title: str
    src: str
    offline: bool


class DownloadRead(BaseModel):
    """Result of a successful download."""

    id: int
    title: str
    size: int
    content_type: str
    message: str
