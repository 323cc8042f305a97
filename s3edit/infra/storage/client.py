"""Storage client protocol and data types.

This module defines the interface the edit service needs from an object
store: object metadata, the multipart upload lifecycle, and part transfers
(either uploaded bytes or server-side copies of an existing object range).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class StoreRequestFailedError(StorageError):
    """Raised when a store call fails at the transport or service level."""


class ObjectNotFoundError(StorageError):
    """Raised when the target object does not exist."""


class MissingUploadIdError(StorageError):
    """Raised when the store does not return an upload id for a new session."""


class MissingPartTagError(StorageError):
    """Raised when the store does not return an ETag for a part."""


@dataclass(frozen=True, slots=True)
class CompletedPart:
    """Represents a completed part in a multipart upload."""

    part_number: int
    etag: str


@dataclass(frozen=True, slots=True)
class MultipartUpload:
    """Result of initiating a multipart upload."""

    upload_id: str
    bucket: str
    object_key: str


@dataclass(frozen=True, slots=True)
class ObjectHead:
    """Metadata from a HEAD object request."""

    size_bytes: int
    etag: str | None
    content_type: str | None


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive byte range, as used by the ``bytes=first-last`` header."""

    first: int
    last: int

    @classmethod
    def from_half_open(cls, start: int, end: int) -> "ByteRange":
        if end <= start:
            raise ValueError(f"empty byte range [{start}, {end})")
        return cls(first=start, last=end - 1)

    def header(self) -> str:
        return f"bytes={self.first}-{self.last}"


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Implementations must provide all methods defined here.
    Currently supports S3-compatible storage services.
    """

    def head_object(self, *, bucket: str, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.

        Returns:
            ObjectHead with size, ETag, and content type.

        Raises:
            ObjectNotFoundError: If the object doesn't exist.
            StoreRequestFailedError: If the operation fails.
        """
        ...

    def init_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> MultipartUpload:
        """Initialize a multipart upload session.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            content_type: MIME type of the object.
            metadata: Custom metadata to attach to the object.

        Returns:
            MultipartUpload containing the upload_id for subsequent operations.

        Raises:
            MissingUploadIdError: If the response carries no upload id.
            StoreRequestFailedError: If the operation fails.
        """
        ...

    def upload_part(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        part_number: int,
        body: bytes | memoryview,
    ) -> str:
        """Upload one part from an in-memory buffer.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            upload_id: Multipart upload ID from init_multipart_upload.
            part_number: Part number (1-based, max 10000).
            body: Part content.

        Returns:
            The ETag assigned to the part.

        Raises:
            MissingPartTagError: If the response carries no ETag.
            StoreRequestFailedError: If the operation fails.
        """
        ...

    def upload_part_copy(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        part_number: int,
        source_bucket: str,
        source_key: str,
        byte_range: ByteRange,
        source_etag: str | None = None,
    ) -> str:
        """Create a part by copying a byte range of an existing object.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            upload_id: Multipart upload ID from init_multipart_upload.
            part_number: Part number (1-based, max 10000).
            source_bucket: Bucket of the object to copy from.
            source_key: Key of the object to copy from.
            byte_range: Inclusive source range.
            source_etag: When set, the copy only succeeds if the source
                still has this ETag.

        Returns:
            The ETag assigned to the part.

        Raises:
            MissingPartTagError: If the response carries no ETag.
            StoreRequestFailedError: If the operation fails.
        """
        ...

    def complete_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        parts: Sequence[CompletedPart],
    ) -> None:
        """Complete a multipart upload by combining all parts.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            upload_id: Multipart upload ID.
            parts: List of completed parts with their ETags.

        Raises:
            StoreRequestFailedError: If the operation fails.
        """
        ...

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        """Abort a multipart upload and clean up uploaded parts.

        Args:
            bucket: Target bucket name.
            object_key: Object key (path) in the bucket.
            upload_id: Multipart upload ID to abort.

        Raises:
            StoreRequestFailedError: If the operation fails.
        """
        ...

    def get_object_range(
        self, *, bucket: str, object_key: str, byte_range: ByteRange
    ) -> bytes:
        """Read an inclusive byte range of an object.

        Raises:
            ObjectNotFoundError: If the object doesn't exist.
            StoreRequestFailedError: If the operation fails.
        """
        ...
