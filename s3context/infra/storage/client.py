"""Storage client protocol and data types.

This module defines the interface the bucket context relies on: a small
set of single-request object operations plus bucket creation and removal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Protocol

# MD5 of zero bytes; S3 reports it as the ETag of every empty object.
EMPTY_ETAG = "d41d8cd98f00b204e9800998ecf8427e"


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class StorageRequestFailed(StorageError):
    """A storage request failed; the SDK exception is kept as ``cause``."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def normalize_etag(etag: str | None) -> str:
    if not etag:
        return ""
    return etag.strip('"')


@dataclass(frozen=True, slots=True)
class ObjectSummary:
    """One entry of a bucket listing."""

    key: str
    etag: str
    size: int
    last_modified: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return self.etag == EMPTY_ETAG


@dataclass(slots=True)
class StoredObject:
    """Object metadata together with its (unread) body stream."""

    bucket: str
    key: str
    body: BinaryIO
    size: int
    etag: str
    content_type: str | None = None
    last_modified: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def read(self) -> bytes:
        return self.body.read()

    def close(self) -> None:
        self.body.close()


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Every method issues exactly one request and raises
    :class:`StorageRequestFailed` when the backend reports an error.
    """

    def create_bucket(self, *, bucket: str) -> None:
        ...

    def delete_bucket(self, *, bucket: str) -> None:
        ...

    def get_object(self, *, bucket: str, object_key: str) -> StoredObject:
        """Fetch an object body and its metadata.

        Raises:
            StorageRequestFailed: If the object doesn't exist or the request fails.
        """
        ...

    def put_object(
        self,
        *,
        bucket: str,
        object_key: str,
        content: str | bytes,
        content_type: str | None = None,
    ) -> str:
        """Upload ``content`` (``str`` is encoded as UTF-8), returning the ETag."""
        ...

    def copy_object(
        self,
        *,
        source_bucket: str,
        source_key: str,
        dest_bucket: str,
        dest_key: str,
    ) -> str:
        """Server-side copy, returning the ETag of the new object."""
        ...

    def delete_object(self, *, bucket: str, object_key: str) -> None:
        """Delete an object. Deleting an absent key is not an error."""
        ...

    def object_exists(self, *, bucket: str, object_key: str) -> bool:
        """Probe object metadata without downloading the content."""
        ...

    def list_objects(
        self, *, bucket: str, prefix: str | None = None
    ) -> list[ObjectSummary]:
        """Return the first page of a listing, in the order the backend returns it."""
        ...
