"""Patch byte ranges of large objects in S3-compatible stores in place.

Only the replacement bytes travel over the network; the rest of the object is
copied server-side into a new multipart upload of the same key.

    import s3edit
    s3edit.modify("plot.bin", s3edit.EditRequest(1024, b"\\x01" * 4096))
"""

from __future__ import annotations

from s3edit.common.config import ConfigLoadError, get_settings
from s3edit.domain.segments import (
    EditError,
    EditRequest,
    InvalidEditWindowError,
    ObjectDescriptor,
    PayloadConsumedError,
    TooManyPartsError,
)
from s3edit.infra.storage.client import (
    MissingPartTagError,
    MissingUploadIdError,
    ObjectNotFoundError,
    StorageError,
    StoreRequestFailedError,
)
from s3edit.infra.storage.registry import get_storage
from s3edit.services.edit_service import ObjectEditService

__all__ = [
    "ConfigLoadError",
    "EditError",
    "EditRequest",
    "InvalidEditWindowError",
    "MissingPartTagError",
    "MissingUploadIdError",
    "ObjectDescriptor",
    "ObjectNotFoundError",
    "PayloadConsumedError",
    "StorageError",
    "StoreRequestFailedError",
    "TooManyPartsError",
    "get_edit_service",
    "modify",
]


def get_edit_service() -> ObjectEditService:
    handle = get_storage()
    return ObjectEditService(handle.client, bucket=handle.bucket, settings=get_settings())


def modify(key: str, edit: EditRequest) -> ObjectDescriptor:
    """Overwrite ``edit.length`` bytes of ``key`` at ``edit.offset``.

    Uses the process-wide client configured from the file named by
    ``S3_STORE_CONFIG``.
    """
    return get_edit_service().modify(key, edit)
