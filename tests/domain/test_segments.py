"""Tests for edit requests and the segment planner."""

from __future__ import annotations

from array import array

import pytest

from s3edit.domain.segments import (
    CopySegment,
    EditRequest,
    InvalidEditWindowError,
    PayloadConsumedError,
    TooManyPartsError,
    UploadSegment,
    check_part_count,
    plan_segments,
)

GIB = 1024 * 1024 * 1024


def _spans(segments):
    return [(type(s).__name__, s.start, s.end) for s in segments]


def _assert_valid_plan(segments, total_length, offset, length, max_part_size):
    cursor = 0
    for segment in segments:
        assert segment.start == cursor
        assert segment.end > segment.start
        assert segment.length <= max_part_size
        cursor = segment.end
    assert cursor == total_length

    uploads = [s for s in segments if isinstance(s, UploadSegment)]
    if length:
        assert uploads[0].start == offset
        assert uploads[-1].end == offset + length
    else:
        assert uploads == []

    for segment in segments:
        if isinstance(segment, CopySegment):
            # copies never overlap the edit window
            assert segment.end <= offset or segment.start >= offset + length


class TestPlanScenarios:
    def test_edit_in_the_middle_of_a_large_object(self):
        segments = plan_segments(3_000_000_000, 1_500_000_000, b"x" * 10, GIB)

        assert _spans(segments) == [
            ("CopySegment", 0, 1073741824),
            ("CopySegment", 1073741824, 1500000000),
            ("UploadSegment", 1500000000, 1500000010),
            ("CopySegment", 1500000010, 2573741834),
            ("CopySegment", 2573741834, 3000000000),
        ]

    def test_edit_covering_the_whole_object(self):
        segments = plan_segments(5, 0, b"hello", GIB)

        assert _spans(segments) == [("UploadSegment", 0, 5)]
        assert bytes(segments[0].data) == b"hello"

    def test_edit_ending_on_a_natural_part_boundary(self):
        # the edit closes the second max-size span exactly at the object end
        segments = plan_segments(8, 6, b"ab", 4)

        assert _spans(segments) == [
            ("CopySegment", 0, 4),
            ("CopySegment", 4, 6),
            ("UploadSegment", 6, 8),
        ]

    def test_edit_starting_on_a_natural_part_boundary(self):
        segments = plan_segments(12, 4, b"abcd", 4)

        assert _spans(segments) == [
            ("CopySegment", 0, 4),
            ("UploadSegment", 4, 8),
            ("CopySegment", 8, 12),
        ]

    def test_copy_spans_restart_from_edit_end(self):
        segments = plan_segments(10, 1, b"z", 4)

        assert _spans(segments) == [
            ("CopySegment", 0, 1),
            ("UploadSegment", 1, 2),
            ("CopySegment", 2, 6),
            ("CopySegment", 6, 10),
        ]

    def test_empty_object_yields_empty_plan(self):
        assert plan_segments(0, 0, b"", 4) == []

    def test_empty_payload_yields_copy_only_plan(self):
        segments = plan_segments(10, 3, b"", 4)

        assert _spans(segments) == [
            ("CopySegment", 0, 4),
            ("CopySegment", 4, 8),
            ("CopySegment", 8, 10),
        ]


class TestOversizedEdit:
    def test_payload_larger_than_max_part_is_split(self):
        segments = plan_segments(20, 2, b"0123456789", 4)

        assert _spans(segments) == [
            ("CopySegment", 0, 2),
            ("UploadSegment", 2, 6),
            ("UploadSegment", 6, 10),
            ("UploadSegment", 10, 12),
            ("CopySegment", 12, 16),
            ("CopySegment", 16, 20),
        ]
        uploaded = b"".join(
            bytes(s.data) for s in segments if isinstance(s, UploadSegment)
        )
        assert uploaded == b"0123456789"

    def test_split_chunks_share_the_payload_buffer(self):
        payload = bytearray(b"abcdefgh")
        segments = plan_segments(8, 0, payload, 4)

        payload[0:1] = b"X"
        assert bytes(segments[0].data) == b"Xbcd"


class TestPlanProperties:
    @pytest.mark.parametrize("max_part_size", [1, 3, 4, 7, 16])
    def test_every_valid_window_produces_a_valid_plan(self, max_part_size):
        for total_length in range(0, 14):
            for offset in range(0, total_length + 1):
                for length in range(0, total_length - offset + 1):
                    segments = plan_segments(
                        total_length, offset, b"p" * length, max_part_size
                    )
                    _assert_valid_plan(
                        segments, total_length, offset, length, max_part_size
                    )

    def test_single_upload_segment_when_payload_fits(self):
        for offset in range(0, 30):
            segments = plan_segments(40, offset, b"q" * 5, 8)
            uploads = [s for s in segments if isinstance(s, UploadSegment)]
            assert [(u.start, u.end) for u in uploads] == [(offset, offset + 5)]

    def test_rejects_non_positive_max_part_size(self):
        with pytest.raises(ValueError, match="max_part_size"):
            plan_segments(10, 0, b"a", 0)

    def test_rejects_negative_total_length(self):
        with pytest.raises(ValueError, match="total_length"):
            plan_segments(-1, 0, b"", 4)


class TestEditRequest:
    def test_take_payload_moves_the_buffer(self):
        edit = EditRequest(3, b"abc")

        view = edit.take_payload()

        assert bytes(view) == b"abc"
        assert edit.consumed
        assert edit.length == 3
        with pytest.raises(PayloadConsumedError):
            edit.take_payload()

    def test_length_counts_bytes_of_wide_item_views(self):
        edit = EditRequest(4, memoryview(array("q", [1, 2, 3])))

        assert edit.length == 3 * 8
        assert len(edit.take_payload()) == edit.length

    def test_validate_uses_byte_length_of_wide_item_views(self):
        edit = EditRequest(10, memoryview(array("q", [1, 2, 3])))

        with pytest.raises(InvalidEditWindowError):
            edit.validate(16)

    def test_validate_accepts_window_ending_at_object_end(self):
        EditRequest(7, b"abc").validate(10)

    def test_validate_rejects_window_past_object_end(self):
        with pytest.raises(InvalidEditWindowError, match="exceeds object length 10"):
            EditRequest(8, b"abc").validate(10)

    def test_validate_rejects_negative_offset(self):
        with pytest.raises(InvalidEditWindowError, match="non-negative"):
            EditRequest(-1, b"a").validate(10)

    def test_repr_does_not_include_payload(self):
        edit = EditRequest(0, b"secret")
        assert "secret" not in repr(edit)
        assert "pending" in repr(edit)


class TestPartCount:
    def test_allows_plan_at_the_limit(self):
        check_part_count([CopySegment(0, 1)] * 3, 3)

    def test_rejects_plan_over_the_limit(self):
        segments = plan_segments(100, 50, b"x", 1)

        with pytest.raises(TooManyPartsError, match="100 parts"):
            check_part_count(segments, 10)
