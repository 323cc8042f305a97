"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
enabling support for S3, MinIO, and other S3-compatible services.
"""

from .client import (
    ByteRange,
    CompletedPart,
    MissingPartTagError,
    MissingUploadIdError,
    MultipartUpload,
    ObjectHead,
    ObjectNotFoundError,
    StorageClient,
    StorageError,
    StoreRequestFailedError,
)

__all__ = [
    "ByteRange",
    "CompletedPart",
    "MissingPartTagError",
    "MissingUploadIdError",
    "MultipartUpload",
    "ObjectHead",
    "ObjectNotFoundError",
    "StorageClient",
    "StorageError",
    "StoreRequestFailedError",
]
