"""
Domain layer: edit requests, part plans and the errors raised while building them.
"""

from .segments import (
    CopySegment,
    EditError,
    EditRequest,
    InvalidEditWindowError,
    ObjectDescriptor,
    PartResult,
    PayloadConsumedError,
    Segment,
    TooManyPartsError,
    UploadSegment,
    check_part_count,
    plan_segments,
)

__all__ = [
    "CopySegment",
    "EditError",
    "EditRequest",
    "InvalidEditWindowError",
    "ObjectDescriptor",
    "PartResult",
    "PayloadConsumedError",
    "Segment",
    "TooManyPartsError",
    "UploadSegment",
    "check_part_count",
    "plan_segments",
]
