"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, and local S3 mocks. Path-style addressing is always
enabled so that endpoints without virtual-host bucket support work.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from s3context.infra.storage.client import (
    ObjectSummary,
    StorageError,
    StorageRequestFailed,
    StoredObject,
    normalize_etag,
)

if TYPE_CHECKING:
    from s3context.common.config import S3Settings

logger = logging.getLogger("s3context.storage")

_MISSING_OBJECT_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return ""
    return str(response.get("Error", {}).get("Code", ""))


class S3StorageClient:
    """S3-compatible object storage client.

    Either wraps a pre-built boto3 client or builds one from
    :class:`~s3context.common.config.S3Settings`.
    """

    def __init__(self, *, client: Any):
        self._client = client

    @property
    def raw(self) -> Any:
        """The underlying boto3 client."""
        return self._client

    @classmethod
    def from_settings(cls, settings: "S3Settings") -> "S3StorageClient":
        return cls(client=cls._build_client(settings))

    @staticmethod
    def _build_client(settings: "S3Settings") -> Any:
        """Create a boto3 S3 client from settings.

        No request is sent here; an unreachable endpoint only surfaces on
        the first real call.
        """
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise StorageError(
                "boto3 and botocore are required for S3 storage backend. "
                "Install with: pip install boto3"
            ) from exc

        params: dict[str, Any] = {
            "region_name": settings.region,
            "aws_access_key_id": settings.access_key_id,
            "aws_secret_access_key": settings.secret_access_key,
            "config": Config(s3={"addressing_style": "path"}),
        }
        if settings.endpoint_url:
            params["endpoint_url"] = settings.endpoint_url

        logger.info(
            "s3_client_created",
            extra={
                "extra": {
                    "region": settings.region,
                    "endpoint_url": settings.endpoint_url or None,
                }
            },
        )
        return boto3.client("s3", **params)

    def create_bucket(self, *, bucket: str) -> None:
        try:
            self._client.create_bucket(Bucket=bucket)
        except Exception as exc:
            raise StorageRequestFailed("create_bucket", exc) from exc

    def delete_bucket(self, *, bucket: str) -> None:
        try:
            self._client.delete_bucket(Bucket=bucket)
        except Exception as exc:
            raise StorageRequestFailed("delete_bucket", exc) from exc

    def get_object(self, *, bucket: str, object_key: str) -> StoredObject:
        try:
            response = self._client.get_object(Bucket=bucket, Key=object_key)
        except Exception as exc:
            raise StorageRequestFailed("get_object", exc) from exc

        size = response.get("ContentLength")
        return StoredObject(
            bucket=bucket,
            key=object_key,
            body=response["Body"],
            size=int(size) if size is not None else 0,
            etag=normalize_etag(response.get("ETag")),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            metadata=dict(response.get("Metadata") or {}),
        )

    def put_object(
        self,
        *,
        bucket: str,
        object_key: str,
        content: str | bytes,
        content_type: str | None = None,
    ) -> str:
        body = content.encode("utf-8") if isinstance(content, str) else content
        params: dict[str, Any] = {"Bucket": bucket, "Key": object_key, "Body": body}
        if content_type:
            params["ContentType"] = content_type

        try:
            response = self._client.put_object(**params)
        except Exception as exc:
            raise StorageRequestFailed("put_object", exc) from exc
        return normalize_etag(response.get("ETag"))

    def copy_object(
        self,
        *,
        source_bucket: str,
        source_key: str,
        dest_bucket: str,
        dest_key: str,
    ) -> str:
        try:
            response = self._client.copy_object(
                Bucket=dest_bucket,
                Key=dest_key,
                CopySource={"Bucket": source_bucket, "Key": source_key},
            )
        except Exception as exc:
            raise StorageRequestFailed("copy_object", exc) from exc
        return normalize_etag(response.get("CopyObjectResult", {}).get("ETag"))

    def delete_object(self, *, bucket: str, object_key: str) -> None:
        try:
            self._client.delete_object(Bucket=bucket, Key=object_key)
        except Exception as exc:
            raise StorageRequestFailed("delete_object", exc) from exc

    def object_exists(self, *, bucket: str, object_key: str) -> bool:
        try:
            self._client.head_object(Bucket=bucket, Key=object_key)
        except Exception as exc:
            if _error_code(exc) in _MISSING_OBJECT_CODES:
                return False
            raise StorageRequestFailed("head_object", exc) from exc
        return True

    def list_objects(
        self, *, bucket: str, prefix: str | None = None
    ) -> list[ObjectSummary]:
        params: dict[str, Any] = {"Bucket": bucket}
        if prefix is not None:
            params["Prefix"] = prefix

        try:
            response = self._client.list_objects(**params)
        except Exception as exc:
            raise StorageRequestFailed("list_objects", exc) from exc

        if response.get("IsTruncated"):
            logger.debug(
                "list_objects_truncated",
                extra={"extra": {"bucket": bucket, "prefix": prefix}},
            )

        return [
            ObjectSummary(
                key=item["Key"],
                etag=normalize_etag(item.get("ETag")),
                size=int(item.get("Size") or 0),
                last_modified=item.get("LastModified"),
            )
            for item in response.get("Contents", [])
        ]
