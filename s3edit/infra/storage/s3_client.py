"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, Ceph RGW, and other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from s3edit.infra.storage.client import (
    ByteRange,
    CompletedPart,
    MissingPartTagError,
    MissingUploadIdError,
    MultipartUpload,
    ObjectHead,
    ObjectNotFoundError,
    StoreRequestFailedError,
)

if TYPE_CHECKING:
    from s3edit.common.config import S3Config

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound", "NoSuchBucket"})


def _is_not_found(exc: ClientError) -> bool:
    error = exc.response.get("Error", {}) if exc.response else {}
    return str(error.get("Code", "")) in _NOT_FOUND_CODES


class S3StorageClient:
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations.
    """

    def __init__(self, *, config: "S3Config") -> None:
        """Initialize the S3 client from a loaded store configuration.

        Args:
            config: Endpoint, region and optional static credentials.
        """
        self._config = config
        self._client = self._build_client(config)

    @staticmethod
    def _build_client(config: "S3Config") -> Any:
        """Create a boto3 S3 client from the store configuration."""
        addressing_style = (config.addressing_style or "path").strip().lower()
        botocore_config = Config(s3={"addressing_style": addressing_style})

        # Credentials are only passed when both halves are configured; otherwise
        # boto3 falls back to its default provider chain.
        credentials: dict[str, str] = {}
        if config.access_key and config.secret_key:
            credentials = {
                "aws_access_key_id": config.access_key,
                "aws_secret_access_key": config.secret_key,
            }

        return boto3.client(
            "s3",
            endpoint_url=config.endpoint,
            region_name=config.region,
            use_ssl=bool(config.use_ssl),
            config=botocore_config,
            **credentials,
        )

    def head_object(self, *, bucket: str, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content."""
        try:
            response = self._client.head_object(Bucket=bucket, Key=object_key)
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(
                    f"Object not found: {bucket}/{object_key}"
                ) from exc
            raise StoreRequestFailedError(
                f"Failed to get object metadata: {exc}"
            ) from exc
        except Exception as exc:
            raise StoreRequestFailedError(
                f"Failed to get object metadata: {exc}"
            ) from exc

        size = response.get("ContentLength")
        if size is None:
            raise StoreRequestFailedError(
                f"S3 response missing ContentLength for {bucket}/{object_key}"
            )
        return ObjectHead(
            size_bytes=int(size),
            etag=response.get("ETag"),
            content_type=response.get("ContentType"),
        )

    def init_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> MultipartUpload:
        """Initialize a multipart upload session."""
        params: dict[str, Any] = {"Bucket": bucket, "Key": object_key}
        if content_type:
            params["ContentType"] = content_type
        if metadata:
            params["Metadata"] = metadata

        try:
            response = self._client.create_multipart_upload(**params)
        except Exception as exc:
            raise StoreRequestFailedError(
                f"Failed to create multipart upload: {exc}"
            ) from exc

        upload_id = response.get("UploadId")
        if not upload_id:
            raise MissingUploadIdError(
                f"S3 response missing UploadId for {bucket}/{object_key}"
            )

        return MultipartUpload(
            upload_id=str(upload_id),
            bucket=bucket,
            object_key=object_key,
        )

    def upload_part(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        part_number: int,
        body: bytes | memoryview,
    ) -> str:
        """Upload one part from an in-memory buffer."""
        # botocore does not accept memoryview bodies; only this part is copied
        payload = body.tobytes() if isinstance(body, memoryview) else body
        try:
            response = self._client.upload_part(
                Bucket=bucket,
                Key=object_key,
                UploadId=upload_id,
                PartNumber=int(part_number),
                Body=payload,
            )
        except Exception as exc:
            raise StoreRequestFailedError(
                f"Failed to upload part {part_number}: {exc}"
            ) from exc

        etag = response.get("ETag")
        if not etag:
            raise MissingPartTagError(
                f"S3 response missing ETag for part {part_number} of {object_key}"
            )
        return str(etag)

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
        """Create a part by copying a byte range of an existing object."""
        params: dict[str, Any] = {
            "Bucket": bucket,
            "Key": object_key,
            "UploadId": upload_id,
            "PartNumber": int(part_number),
            "CopySource": {"Bucket": source_bucket, "Key": source_key},
            "CopySourceRange": byte_range.header(),
        }
        if source_etag:
            params["CopySourceIfMatch"] = source_etag

        try:
            response = self._client.upload_part_copy(**params)
        except Exception as exc:
            raise StoreRequestFailedError(
                f"Failed to copy part {part_number} ({byte_range.header()}): {exc}"
            ) from exc

        etag = (response.get("CopyPartResult") or {}).get("ETag")
        if not etag:
            raise MissingPartTagError(
                f"S3 response missing CopyPartResult.ETag for part {part_number} "
                f"of {object_key}"
            )
        return str(etag)

    def complete_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        parts: Sequence[CompletedPart],
    ) -> None:
        """Complete a multipart upload by combining all parts."""
        multipart_payload = {
            "Parts": [
                {"ETag": part.etag, "PartNumber": int(part.part_number)}
                for part in parts
            ]
        }

        try:
            self._client.complete_multipart_upload(
                Bucket=bucket,
                Key=object_key,
                UploadId=upload_id,
                MultipartUpload=multipart_payload,
            )
        except Exception as exc:
            raise StoreRequestFailedError(
                f"Failed to complete multipart upload: {exc}"
            ) from exc

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        """Abort a multipart upload and clean up uploaded parts."""
        try:
            self._client.abort_multipart_upload(
                Bucket=bucket,
                Key=object_key,
                UploadId=upload_id,
            )
        except Exception as exc:
            raise StoreRequestFailedError(
                f"Failed to abort multipart upload: {exc}"
            ) from exc

    def get_object_range(
        self, *, bucket: str, object_key: str, byte_range: ByteRange
    ) -> bytes:
        """Read an inclusive byte range of an object."""
        try:
            response = self._client.get_object(
                Bucket=bucket, Key=object_key, Range=byte_range.header()
            )
            return response["Body"].read()
        except ClientError as exc:
            if _is_not_found(exc):
                raise ObjectNotFoundError(
                    f"Object not found: {bucket}/{object_key}"
                ) from exc
            raise StoreRequestFailedError(f"Failed to read object: {exc}") from exc
        except Exception as exc:
            raise StoreRequestFailedError(f"Failed to read object: {exc}") from exc
