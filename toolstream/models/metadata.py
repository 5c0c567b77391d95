"""Simplestreams tools metadata models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

TOOLS_FILE_TYPE = "tar.gz"


class ContentDigest(BaseModel):
    """Size and SHA-256 of a fully consumed byte stream."""

    model_config = ConfigDict(frozen=True)

    size: int
    sha256: str


class ToolsMetadataRecord(BaseModel):
    """One simplestreams item describing a tools tarball.

    ``size`` and ``sha256`` are ``0`` and ``""`` when the tarball was not
    fetched. ``path`` is storage-relative and never starts with ``/``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    release: str
    version: str
    arch: str
    size: int = 0
    path: str
    file_type: str = Field(default=TOOLS_FILE_TYPE, alias="ftype")
    sha256: str = ""

    def to_document(self) -> dict:
        """Return the record as it appears inside a products document."""
        return self.model_dump(by_alias=True)


class StorageObject(BaseModel):
    """A payload destined for a single storage path."""

    model_config = ConfigDict(frozen=True)

    path: str
    data: bytes


class MetadataDocumentPair(BaseModel):
    """Index and products documents generated in the same run.

    The index references the products file by name, so the two are only
    meaningful together.
    """

    model_config = ConfigDict(frozen=True)

    index: bytes
    products: bytes
    index_path: str
    products_path: str

    def objects(self, prefix: str = "") -> list[StorageObject]:
        """Return the storage objects in publish order: products, then index."""
        return [
            StorageObject(path=prefix + self.products_path, data=self.products),
            StorageObject(path=prefix + self.index_path, data=self.index),
        ]
