from .bucket_context import (
    BucketContext,
    ObjectHandle,
    PartialMoveFailure,
    bucket_context,
    with_bucket_context,
)

__all__ = [
    "BucketContext",
    "ObjectHandle",
    "PartialMoveFailure",
    "bucket_context",
    "with_bucket_context",
]
