"""Object storage abstraction layer.

This module provides a protocol-based abstraction over S3-compatible
object storage, with a boto3-backed implementation.
"""

from .client import (
    EMPTY_ETAG,
    ObjectSummary,
    StorageClient,
    StorageError,
    StorageRequestFailed,
    StoredObject,
)
from .s3_client import S3StorageClient

__all__ = [
    "EMPTY_ETAG",
    "ObjectSummary",
    "S3StorageClient",
    "StorageClient",
    "StorageError",
    "StorageRequestFailed",
    "StoredObject",
]
