"""Writes the parts of a planned edit into an open multipart upload."""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Sequence

from s3edit.domain.segments import (
    CopySegment,
    ObjectDescriptor,
    PartResult,
    Segment,
    UploadSegment,
)
from s3edit.infra.observability.metrics import PART_BYTES, PARTS
from s3edit.infra.storage.client import ByteRange, MultipartUpload, StorageClient

logger = logging.getLogger("s3edit.edit")


class PartExecutor:
    """Issues one store call per segment and collects the part ETags.

    With ``max_workers == 1`` parts are written strictly in order, each call
    finishing before the next starts. Larger values submit parts to a bounded
    thread pool; results are still returned in part-number order.
    """

    def __init__(
        self,
        storage: StorageClient,
        *,
        max_workers: int = 1,
        pin_source_etag: bool = True,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self._storage = storage
        self._max_workers = max_workers
        self._pin_source_etag = pin_source_etag

    def execute(
        self,
        descriptor: ObjectDescriptor,
        upload: MultipartUpload,
        segments: Sequence[Segment],
    ) -> list[PartResult]:
        if self._max_workers == 1 or len(segments) <= 1:
            return [
                self._write_part(descriptor, upload, part_number, segment)
                for part_number, segment in enumerate(segments, start=1)
            ]
        return self._execute_concurrently(descriptor, upload, segments)

    def _execute_concurrently(
        self,
        descriptor: ObjectDescriptor,
        upload: MultipartUpload,
        segments: Sequence[Segment],
    ) -> list[PartResult]:
        workers = min(self._max_workers, len(segments))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="s3edit-part"
        ) as pool:
            futures: dict[Future[PartResult], int] = {
                pool.submit(
                    self._write_part, descriptor, upload, part_number, segment
                ): part_number
                for part_number, segment in enumerate(segments, start=1)
            }
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in done if f.exception() is not None]
            if failed:
                for future in pending:
                    future.cancel()
                first = min(failed, key=lambda f: futures[f])
                raise first.exception()  # type: ignore[misc]

        by_number = {futures[f]: f.result() for f in done}
        return [by_number[n] for n in range(1, len(segments) + 1)]

    def _write_part(
        self,
        descriptor: ObjectDescriptor,
        upload: MultipartUpload,
        part_number: int,
        segment: Segment,
    ) -> PartResult:
        if isinstance(segment, CopySegment):
            byte_range = ByteRange.from_half_open(segment.start, segment.end)
            logger.debug(
                "copy part=%s range=%s key=%s",
                part_number,
                byte_range.header(),
                descriptor.key,
                extra={
                    "extra": {
                        "event": "part_copy",
                        "part_number": part_number,
                        "range": byte_range.header(),
                        "key": descriptor.key,
                    }
                },
            )
            etag = self._storage.upload_part_copy(
                bucket=upload.bucket,
                object_key=upload.object_key,
                upload_id=upload.upload_id,
                part_number=part_number,
                source_bucket=descriptor.bucket,
                source_key=descriptor.key,
                byte_range=byte_range,
                source_etag=descriptor.etag if self._pin_source_etag else None,
            )
            kind = "copy"
        elif isinstance(segment, UploadSegment):
            logger.debug(
                "upload part=%s bytes=%s key=%s",
                part_number,
                segment.length,
                descriptor.key,
                extra={
                    "extra": {
                        "event": "part_upload",
                        "part_number": part_number,
                        "bytes": segment.length,
                        "key": descriptor.key,
                    }
                },
            )
            etag = self._storage.upload_part(
                bucket=upload.bucket,
                object_key=upload.object_key,
                upload_id=upload.upload_id,
                part_number=part_number,
                body=segment.data,
            )
            kind = "upload"
        else:
            raise TypeError(f"unsupported segment type: {type(segment).__name__}")

        PARTS.labels(kind=kind).inc()
        PART_BYTES.labels(kind=kind).inc(segment.length)
        return PartResult(part_number=part_number, etag=etag)
