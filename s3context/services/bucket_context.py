from __future__ import annotations

import codecs
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Generator, TypeVar

from s3context.common.config import S3_BUCKET, ConfigResolver, S3Settings
from s3context.infra.storage.client import (
    ObjectSummary,
    StorageClient,
    StorageRequestFailed,
    StoredObject,
)
from s3context.infra.storage.s3_client import S3StorageClient

logger = logging.getLogger("s3context.context")

T = TypeVar("T")


class PartialMoveFailure(StorageRequestFailed):
    """The copy of a move succeeded but deleting the source failed.

    The object now exists under both keys.
    """

    def __init__(self, source: str, destination: str, cause: BaseException):
        super().__init__("move_object", cause)
        self.source = source
        self.destination = destination

    def __str__(self) -> str:
        return (
            f"copied {self.source!r} to {self.destination!r} but could not "
            f"delete the source: {self.cause}"
        )


class BucketContext:
    """Object operations scoped to a single bucket.

    The storage client and the bucket name are resolved on first use and
    cached for the life of the context. An injected client is borrowed: the
    context never closes it.
    """

    def __init__(
        self,
        bucket_name: str = "",
        client: StorageClient | None = None,
        *,
        resolver: ConfigResolver | None = None,
    ):
        self._bucket_name = bucket_name
        self._client = client
        self._resolver = resolver or ConfigResolver()
        self._settings: S3Settings | None = None
        self._bucket: str | None = None
        self._lock = threading.Lock()

    def __enter__(self) -> "BucketContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    def __repr__(self) -> str:
        return f"BucketContext(bucket={self._bucket or self._bucket_name or None!r})"

    @property
    def resolver(self) -> ConfigResolver:
        return self._resolver

    @property
    def settings(self) -> S3Settings:
        if self._settings is None:
            with self._lock:
                if self._settings is None:
                    self._settings = S3Settings.from_resolver(self._resolver)
        return self._settings

    @property
    def client(self) -> StorageClient:
        if self._client is None:
            settings = self.settings
            with self._lock:
                if self._client is None:
                    self._client = S3StorageClient.from_settings(settings)
        return self._client

    @property
    def bucket(self) -> str:
        if self._bucket is None:
            with self._lock:
                if self._bucket is None:
                    if self._bucket_name:
                        self._bucket = self._bucket_name
                    else:
                        self._bucket = self._resolver.resolve(S3_BUCKET)
        return self._bucket

    def run_in_context(self, work: Callable[["BucketContext"], T]) -> T:
        """Run ``work`` synchronously against this context and return its result."""
        return work(self)

    def object(self, key: str) -> "ObjectHandle":
        return ObjectHandle(self, key)

    # =========================================================================
    # Object operations
    # =========================================================================

    def copy_to(self, source_key: str, destination_key: str) -> str:
        bucket = self.bucket
        logger.debug(
            "copy_object",
            extra={"extra": {"bucket": bucket, "source": source_key, "destination": destination_key}},
        )
        return self.client.copy_object(
            source_bucket=bucket,
            source_key=source_key,
            dest_bucket=bucket,
            dest_key=destination_key,
        )

    def move_to(self, source_key: str, destination_key: str) -> None:
        """Copy ``source_key`` to ``destination_key``, then delete the source.

        This is not atomic. When the delete fails the copy stays in place and
        :class:`PartialMoveFailure` is raised.
        """
        self.copy_to(source_key, destination_key)
        try:
            self.delete(source_key)
        except StorageRequestFailed as exc:
            logger.warning(
                "partial_move",
                extra={
                    "extra": {
                        "bucket": self.bucket,
                        "source": source_key,
                        "destination": destination_key,
                    }
                },
            )
            raise PartialMoveFailure(source_key, destination_key, exc.cause) from exc

    def put_to(self, content: str | bytes, destination_key: str) -> str:
        bucket = self.bucket
        logger.debug("put_object", extra={"extra": {"bucket": bucket, "key": destination_key}})
        return self.client.put_object(
            bucket=bucket, object_key=destination_key, content=content
        )

    def delete(self, key: str) -> None:
        bucket = self.bucket
        logger.debug("delete_object", extra={"extra": {"bucket": bucket, "key": key}})
        self.client.delete_object(bucket=bucket, object_key=key)

    def exists(self, key: str) -> bool:
        return self.client.object_exists(bucket=self.bucket, object_key=key)

    def get_object(self, key: str) -> StoredObject:
        return self.client.get_object(bucket=self.bucket, object_key=key)

    def reader(self, key: str) -> codecs.StreamReader:
        """Open a UTF-8 text reader over the object body.

        A leading byte-order mark is dropped.
        """
        return codecs.getreader("utf-8-sig")(self.get_object(key).body)

    def list_objects(
        self,
        prefix: str | None = None,
        suffix: str | None = None,
        skip_empty: bool = False,
    ) -> list[ObjectSummary]:
        """List objects of the bucket, optionally filtered.

        Args:
            prefix: Server-side key prefix; all objects when ``None``.
            suffix: Keep only keys ending with this exact string.
            skip_empty: Drop objects whose ETag marks zero-byte content.

        Returns:
            Summaries in listing order. Only the first page of the listing
            is considered.
        """
        summaries = self.client.list_objects(bucket=self.bucket, prefix=prefix)
        if suffix is not None:
            summaries = [s for s in summaries if s.key.endswith(suffix)]
        if skip_empty:
            summaries = [s for s in summaries if not s.is_empty]
        return list(summaries)


class ObjectHandle:
    """A single key bound to a :class:`BucketContext`."""

    def __init__(self, context: BucketContext, key: str):
        self.context = context
        self.key = key

    def __repr__(self) -> str:
        return f"ObjectHandle(key={self.key!r})"

    def copy_to(self, destination_key: str) -> "ObjectHandle":
        self.context.copy_to(self.key, destination_key)
        return ObjectHandle(self.context, destination_key)

    def move_to(self, destination_key: str) -> "ObjectHandle":
        self.context.move_to(self.key, destination_key)
        return ObjectHandle(self.context, destination_key)

    def put(self, content: str | bytes) -> "ObjectHandle":
        self.context.put_to(content, self.key)
        return self

    def delete(self) -> None:
        self.context.delete(self.key)

    def exists(self) -> bool:
        return self.context.exists(self.key)

    def reader(self) -> codecs.StreamReader:
        return self.context.reader(self.key)

    def get(self) -> StoredObject:
        return self.context.get_object(self.key)


def with_bucket_context(
    work: Callable[[BucketContext], T],
    bucket_name: str = "",
    client: StorageClient | None = None,
) -> T:
    """Build a :class:`BucketContext` and run ``work`` in it immediately.

    Usage: ``with_bucket_context(work, bucket_name="reports", client=my_client)``.
    """
    return BucketContext(bucket_name, client).run_in_context(work)


@contextmanager
def bucket_context(
    bucket_name: str = "", client: StorageClient | None = None
) -> Generator[BucketContext, None, None]:
    with BucketContext(bucket_name, client) as context:
        yield context
