"""
Bucket-scoped convenience operations over an S3-compatible object store.

Credentials, region, endpoint and bucket are read from process properties
or environment variables:
S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY, S3_BUCKET, S3_REGION and the
optional AWS_ENDPOINT (used to point at a local mock or S3-compatible store).

Call ``setup_logging()`` to emit the library's log records as JSON lines.
"""

from s3context.common.config import (
    ConfigResolver,
    ConfigurationError,
    ConfigurationMissing,
    S3Settings,
    clear_properties,
    clear_property,
    set_property,
)
from s3context.common.logging import JsonFormatter, setup_logging
from s3context.infra.storage import (
    EMPTY_ETAG,
    ObjectSummary,
    S3StorageClient,
    StorageClient,
    StorageError,
    StorageRequestFailed,
    StoredObject,
)
from s3context.services import (
    BucketContext,
    ObjectHandle,
    PartialMoveFailure,
    bucket_context,
    with_bucket_context,
)

__version__ = "0.1.0"
__all__ = [
    "BucketContext",
    "ObjectHandle",
    "with_bucket_context",
    "bucket_context",
    "ConfigResolver",
    "S3Settings",
    "set_property",
    "clear_property",
    "clear_properties",
    "setup_logging",
    "JsonFormatter",
    "S3StorageClient",
    "StorageClient",
    "ObjectSummary",
    "StoredObject",
    "EMPTY_ETAG",
    "ConfigurationError",
    "ConfigurationMissing",
    "StorageError",
    "StorageRequestFailed",
    "PartialMoveFailure",
]
