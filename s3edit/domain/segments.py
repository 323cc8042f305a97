"""Edit requests and the part plan that realises them.

An edit replaces ``len(payload)`` bytes at ``offset`` of an existing object.
The store can only rewrite whole objects, so the edit is expressed as an
ordered list of segments covering ``[0, total_length)``: ranges copied
server-side from the current object and ranges uploaded from the payload.
Segment order is part order; part numbers run ``1..N``.

The planner is pure. It never talks to the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Union


class EditError(Exception):
    """Base class for errors raised while preparing or applying an edit."""


class InvalidEditWindowError(EditError):
    """Raised when the edit range does not fit inside the object."""


class TooManyPartsError(EditError):
    """Raised when a plan needs more parts than the store accepts."""


class PayloadConsumedError(EditError):
    """Raised when an edit payload is taken a second time."""


class EditRequest:
    """Replacement bytes and where they go.

    The payload is handed over once via :meth:`take_payload`; after that the
    request only remembers its offset and length.
    """

    __slots__ = ("offset", "length", "_payload")

    def __init__(self, offset: int, payload: bytes | bytearray | memoryview):
        self.offset = int(offset)
        self._payload: bytes | bytearray | memoryview | None = payload
        self.length = memoryview(payload).nbytes

    def __repr__(self) -> str:
        state = "consumed" if self._payload is None else "pending"
        return f"EditRequest(offset={self.offset}, length={self.length}, {state})"

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def consumed(self) -> bool:
        return self._payload is None

    def take_payload(self) -> memoryview:
        if self._payload is None:
            raise PayloadConsumedError(
                f"payload for edit at offset {self.offset} was already consumed"
            )
        payload, self._payload = self._payload, None
        return memoryview(payload).cast("B")

    def validate(self, total_length: int) -> None:
        if self.offset < 0:
            raise InvalidEditWindowError(
                f"edit offset must be non-negative, got {self.offset}"
            )
        if self.end > total_length:
            raise InvalidEditWindowError(
                f"edit window [{self.offset}, {self.end}) exceeds object length "
                f"{total_length}"
            )


@dataclass(frozen=True, slots=True)
class ObjectDescriptor:
    bucket: str
    key: str
    total_length: int
    etag: str | None = None


@dataclass(frozen=True, slots=True)
class CopySegment:
    """Bytes kept from the current object at the same offsets."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class UploadSegment:
    """Replacement bytes written at ``[start, end)``."""

    start: int
    end: int
    data: memoryview = field(repr=False, compare=False)

    @property
    def length(self) -> int:
        return self.end - self.start


Segment = Union[CopySegment, UploadSegment]


@dataclass(frozen=True, slots=True)
class PartResult:
    part_number: int
    etag: str


def _split_upload(
    offset: int, payload: memoryview, max_part_size: int
) -> list[UploadSegment]:
    segments = []
    for chunk_start in range(0, len(payload), max_part_size):
        chunk = payload[chunk_start : chunk_start + max_part_size]
        start = offset + chunk_start
        segments.append(UploadSegment(start=start, end=start + len(chunk), data=chunk))
    return segments


def plan_segments(
    total_length: int,
    offset: int,
    payload: bytes | memoryview,
    max_part_size: int,
) -> list[Segment]:
    """Map an object length and one edit window to an ordered part plan.

    Unmodified spans are copied in pieces of at most ``max_part_size`` bytes.
    A copy span that would run into the edit window is cut short at
    ``offset`` so the edit always starts on a part boundary. The payload is
    uploaded as one part, or as consecutive parts of at most
    ``max_part_size`` bytes when it is larger than that.

    The caller validates the window first; see :meth:`EditRequest.validate`.
    """
    if total_length < 0:
        raise ValueError(f"total_length must be non-negative, got {total_length}")
    if max_part_size <= 0:
        raise ValueError(f"max_part_size must be positive, got {max_part_size}")

    view = memoryview(payload).cast("B")
    length = len(view)
    segments: list[Segment] = []
    cursor = 0
    while cursor < total_length:
        if cursor == offset and length:
            segments.extend(_split_upload(offset, view, max_part_size))
            cursor = offset + length
            continue

        end = min(cursor + max_part_size, total_length)
        if length and cursor < offset < end:
            end = offset
        segments.append(CopySegment(start=cursor, end=end))
        cursor = end
    return segments


def check_part_count(segments: Sequence[Segment], max_parts: int) -> None:
    if len(segments) > max_parts:
        raise TooManyPartsError(
            f"edit needs {len(segments)} parts, the store accepts at most {max_parts}"
        )
