"""In-memory storage client for testing edit operations."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Sequence

from s3edit.infra.storage.client import (
    ByteRange,
    CompletedPart,
    MultipartUpload,
    ObjectHead,
    ObjectNotFoundError,
    StoreRequestFailedError,
)


def _etag(data: bytes) -> str:
    return f'"{hashlib.md5(data).hexdigest()}"'


@dataclass
class MockStorageClient:
    """In-memory StorageClient that really assembles multipart uploads.

    ``fail_on`` maps a method name to the part number (or ``True``) at which
    the call raises ``StoreRequestFailedError``.
    """

    objects: dict[str, bytes] = field(default_factory=dict)
    etags: dict[str, str] = field(default_factory=dict)
    uploads: dict[str, dict[str, Any]] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail_on: dict[str, Any] = field(default_factory=dict)
    _upload_counter: int = field(default=0)

    def put(self, bucket: str, object_key: str, data: bytes) -> None:
        """Test helper to create an object directly."""
        key = f"{bucket}/{object_key}"
        self.objects[key] = bytes(data)
        self.etags[key] = _etag(self.objects[key])

    def get(self, bucket: str, object_key: str) -> bytes:
        return self.objects[f"{bucket}/{object_key}"]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _maybe_fail(self, method: str, part_number: int | None = None) -> None:
        trigger = self.fail_on.get(method)
        if trigger is True or (trigger is not None and trigger == part_number):
            raise StoreRequestFailedError(f"injected failure in {method}")

    def head_object(self, *, bucket: str, object_key: str) -> ObjectHead:
        self.calls.append(("head_object", {"bucket": bucket, "object_key": object_key}))
        self._maybe_fail("head_object")
        key = f"{bucket}/{object_key}"
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {key}")
        return ObjectHead(
            size_bytes=len(self.objects[key]),
            etag=self.etags[key],
            content_type="application/octet-stream",
        )

    def init_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        content_type: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> MultipartUpload:
        self.calls.append(
            ("init_multipart_upload", {"bucket": bucket, "object_key": object_key})
        )
        self._maybe_fail("init_multipart_upload")
        self._upload_counter += 1
        upload_id = f"mock-upload-{self._upload_counter}"
        self.uploads[upload_id] = {
            "bucket": bucket,
            "object_key": object_key,
            "parts": {},
            "completed": False,
            "aborted": False,
        }
        return MultipartUpload(upload_id=upload_id, bucket=bucket, object_key=object_key)

    def _open_upload(self, upload_id: str) -> dict[str, Any]:
        upload = self.uploads.get(upload_id)
        if upload is None or upload["completed"] or upload["aborted"]:
            raise StoreRequestFailedError(f"NoSuchUpload: {upload_id}")
        return upload

    def upload_part(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        part_number: int,
        body: bytes | memoryview,
    ) -> str:
        data = bytes(body)
        self.calls.append(
            (
                "upload_part",
                {"part_number": part_number, "size": len(data), "upload_id": upload_id},
            )
        )
        self._maybe_fail("upload_part", part_number)
        upload = self._open_upload(upload_id)
        etag = _etag(data)
        upload["parts"][part_number] = (etag, data)
        return etag

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
        self.calls.append(
            (
                "upload_part_copy",
                {
                    "part_number": part_number,
                    "range": byte_range.header(),
                    "source": f"{source_bucket}/{source_key}",
                    "source_etag": source_etag,
                    "upload_id": upload_id,
                },
            )
        )
        self._maybe_fail("upload_part_copy", part_number)
        upload = self._open_upload(upload_id)
        source = f"{source_bucket}/{source_key}"
        if source not in self.objects:
            raise StoreRequestFailedError(f"NoSuchKey: {source}")
        if source_etag is not None and self.etags[source] != source_etag:
            raise StoreRequestFailedError(f"PreconditionFailed: {source}")
        data = self.objects[source][byte_range.first : byte_range.last + 1]
        etag = _etag(data)
        upload["parts"][part_number] = (etag, data)
        return etag

    def complete_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
        parts: Sequence[CompletedPart],
    ) -> None:
        self.calls.append(
            (
                "complete_multipart_upload",
                {
                    "upload_id": upload_id,
                    "parts": [(p.part_number, p.etag) for p in parts],
                },
            )
        )
        self._maybe_fail("complete_multipart_upload")
        upload = self._open_upload(upload_id)
        numbers = [p.part_number for p in parts]
        if numbers != sorted(set(numbers)):
            raise StoreRequestFailedError("InvalidPartOrder")
        chunks = []
        for part in parts:
            stored = upload["parts"].get(part.part_number)
            if stored is None or stored[0] != part.etag:
                raise StoreRequestFailedError(f"InvalidPart: {part.part_number}")
            chunks.append(stored[1])
        upload["completed"] = True
        self.put(bucket, object_key, b"".join(chunks))

    def abort_multipart_upload(
        self,
        *,
        bucket: str,
        object_key: str,
        upload_id: str,
    ) -> None:
        self.calls.append(("abort_multipart_upload", {"upload_id": upload_id}))
        self._maybe_fail("abort_multipart_upload")
        if upload_id in self.uploads:
            self.uploads[upload_id]["aborted"] = True

    def get_object_range(
        self, *, bucket: str, object_key: str, byte_range: ByteRange
    ) -> bytes:
        self.calls.append(("get_object_range", {"range": byte_range.header()}))
        key = f"{bucket}/{object_key}"
        if key not in self.objects:
            raise ObjectNotFoundError(f"Object not found: {key}")
        return self.objects[key][byte_range.first : byte_range.last + 1]
