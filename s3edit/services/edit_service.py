"""Edit service: patch a byte range of an existing object in place.

The edit is written as a new multipart upload of the same key. Untouched
ranges are copied server-side from the current object, the replacement bytes
are uploaded, and completing the upload swaps the whole object atomically.
Readers see either the old object or the new one, never a mix.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Sequence

from s3edit.common.config import Settings
from s3edit.domain.segments import (
    EditRequest,
    ObjectDescriptor,
    PartResult,
    check_part_count,
    plan_segments,
)
from s3edit.infra.observability.metrics import EDIT_LATENCY, EDITS
from s3edit.infra.storage.client import CompletedPart, MultipartUpload, StorageClient
from s3edit.services.base import BaseService
from s3edit.services.part_executor import PartExecutor

logger = logging.getLogger("s3edit.edit")


def assemble_completed_parts(results: Sequence[PartResult]) -> list[CompletedPart]:
    """Build the completion list, numbering parts by position."""
    return [
        CompletedPart(part_number=index, etag=result.etag)
        for index, result in enumerate(results, start=1)
    ]


@contextmanager
def multipart_session(
    storage: StorageClient, *, bucket: str, object_key: str
) -> Iterator[MultipartUpload]:
    """Open a multipart upload that is aborted unless the block succeeds."""
    upload = storage.init_multipart_upload(bucket=bucket, object_key=object_key)
    try:
        yield upload
    except BaseException:
        try:
            storage.abort_multipart_upload(
                bucket=upload.bucket,
                object_key=upload.object_key,
                upload_id=upload.upload_id,
            )
        except Exception as abort_exc:
            logger.warning(
                "abort failed upload_id=%s key=%s error=%s",
                upload.upload_id,
                object_key,
                abort_exc,
                extra={
                    "extra": {
                        "event": "abort_failed",
                        "upload_id": upload.upload_id,
                        "key": object_key,
                        "error": str(abort_exc),
                    }
                },
            )
        else:
            logger.info(
                "aborted upload_id=%s key=%s",
                upload.upload_id,
                object_key,
                extra={
                    "extra": {
                        "event": "upload_aborted",
                        "upload_id": upload.upload_id,
                        "key": object_key,
                    }
                },
            )
        raise


class ObjectEditService(BaseService):
    """Applies byte-range edits to objects in one bucket."""

    def __init__(
        self,
        storage: StorageClient,
        *,
        bucket: str,
        settings: Settings | None = None,
        executor: PartExecutor | None = None,
    ):
        super().__init__(storage, bucket=bucket, settings=settings)
        self._executor = executor or PartExecutor(
            storage,
            max_workers=self.settings.PART_WORKERS,
            pin_source_etag=self.settings.PIN_SOURCE_ETAG,
        )

    def describe(self, key: str) -> ObjectDescriptor:
        head = self.storage.head_object(bucket=self.bucket, object_key=key)
        return ObjectDescriptor(
            bucket=self.bucket,
            key=key,
            total_length=head.size_bytes,
            etag=head.etag,
        )

    def modify(self, key: str, edit: EditRequest) -> ObjectDescriptor:
        """Overwrite ``edit.length`` bytes of ``key`` starting at ``edit.offset``.

        Args:
            key: Object key in the service bucket. The object must exist.
            edit: Offset and replacement bytes. The payload is consumed.

        Returns:
            The descriptor of the object as it was read before the edit.

        Raises:
            ObjectNotFoundError: If the object doesn't exist.
            InvalidEditWindowError: If the edit does not fit in the object.
            TooManyPartsError: If the plan exceeds the store part limit.
            StorageError: If any store call fails. The upload is aborted.
        """
        started = time.perf_counter()
        try:
            descriptor = self._apply(key, edit)
        except Exception:
            EDITS.labels(outcome="failed").inc()
            raise
        EDIT_LATENCY.observe(time.perf_counter() - started)
        return descriptor

    def _apply(self, key: str, edit: EditRequest) -> ObjectDescriptor:
        descriptor = self.describe(key)
        edit.validate(descriptor.total_length)

        if edit.length == 0:
            edit.take_payload()
            EDITS.labels(outcome="noop").inc()
            logger.info(
                "empty edit key=%s offset=%s",
                key,
                edit.offset,
                extra={"extra": {"event": "edit_noop", "key": key, "offset": edit.offset}},
            )
            return descriptor

        segments = plan_segments(
            descriptor.total_length,
            edit.offset,
            edit.take_payload(),
            self.settings.MAX_PART_SIZE,
        )
        check_part_count(segments, self.settings.MAX_PARTS)

        with multipart_session(
            self.storage, bucket=self.bucket, object_key=key
        ) as upload:
            results = self._executor.execute(descriptor, upload, segments)
            self.storage.complete_multipart_upload(
                bucket=upload.bucket,
                object_key=upload.object_key,
                upload_id=upload.upload_id,
                parts=assemble_completed_parts(results),
            )

        EDITS.labels(outcome="applied").inc()
        logger.info(
            "edited key=%s offset=%s length=%s parts=%s",
            key,
            edit.offset,
            edit.length,
            len(segments),
            extra={
                "extra": {
                    "event": "edit_applied",
                    "key": key,
                    "offset": edit.offset,
                    "length": edit.length,
                    "parts": len(segments),
                    "object_length": descriptor.total_length,
                }
            },
        )
        return descriptor
