"""Unit tests for sortedness verification."""

from __future__ import annotations

import pytest

from tabular_engine.domain.services import RecordComparator, SortednessVerifier
from tabular_engine.domain.services.sortcheck import MAX_BREAK_POSITIONS
from tabular_engine.domain.value_objects import ComparisonMode, Selection


def verifier(mode: ComparisonMode = ComparisonMode.LEXICOGRAPHIC) -> SortednessVerifier:
    return SortednessVerifier(RecordComparator(mode, Selection((0,))))


def rows(*values: str) -> list[tuple[bytes, ...]]:
    return [(v.encode(),) for v in values]


@pytest.mark.unit
class TestSortednessVerifier:
    """Tests for SortednessVerifier.verify."""

    def test_sorted_with_duplicates(self) -> None:
        report = verifier().verify(rows("a", "a", "b", "c", "c"))
        assert report.sorted is True
        assert report.record_count == 5
        assert report.dupe_count == 2
        assert report.unsorted_breaks == 0
        assert report.first_break is None

    def test_stops_at_first_break(self) -> None:
        report = verifier().verify(rows("a", "c", "b", "a", "z"))
        assert report.sorted is False
        assert report.record_count == 2
        assert report.unsorted_breaks == 1
        assert report.first_break is not None
        assert report.first_break.position == 2
        assert report.first_break.current == (b"c",)
        assert report.first_break.next == (b"b",)

    def test_exhaustive_counts_every_break(self) -> None:
        report = verifier().verify(rows("a", "c", "b", "a", "z", "z"), exhaustive=True)
        assert report.sorted is False
        assert report.record_count == 6
        assert report.unsorted_breaks == 2
        assert report.break_positions == (2, 3)
        assert report.dupe_count == 1

    def test_break_positions_capped_on_reversed_input(self) -> None:
        reversed_rows = [(b"%06d" % i,) for i in range(5000, 0, -1)]
        report = verifier().verify(reversed_rows, exhaustive=True)
        assert report.unsorted_breaks == 4999
        assert report.record_count == 5000
        assert len(report.break_positions) == MAX_BREAK_POSITIONS
        assert report.break_positions[:3] == (1, 2, 3)

    def test_custom_position_limit(self) -> None:
        report = verifier().verify(rows("d", "c", "b", "a"), exhaustive=True, max_positions=2)
        assert report.unsorted_breaks == 3
        assert report.break_positions == (1, 2)

    def test_numeric_mode(self) -> None:
        assert verifier(ComparisonMode.NUMERIC).verify(rows("2", "10", "100")).sorted
        assert not verifier().verify(rows("2", "10", "100")).sorted

    def test_ignore_case_mode(self) -> None:
        assert verifier(ComparisonMode.IGNORE_CASE).verify(rows("a", "B", "c")).sorted

    def test_empty(self) -> None:
        report = verifier().verify([])
        assert report.sorted is True
        assert report.record_count == 0

    def test_as_dict_hides_dupes_when_unsorted(self) -> None:
        assert verifier().verify(rows("a", "a")).as_dict() == {
            "sorted": True,
            "record_count": 2,
            "unsorted_breaks": 0,
            "dupe_count": 1,
        }
        assert verifier().verify(rows("b", "b", "a")).as_dict()["dupe_count"] == -1
