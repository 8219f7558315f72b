"""Unit tests for comparison strategies."""

from __future__ import annotations

import pytest

from tabular_engine.domain.services import (
    RecordComparator,
    compare_ignore_case,
    compare_lexicographic,
    compare_numeric,
    parse_number,
)
from tabular_engine.domain.value_objects import ComparisonMode, Ordering, Selection
from tabular_engine.ports.inbound.errors import ConfigurationError


@pytest.mark.unit
class TestLexicographic:
    """Tests for byte-order comparison."""

    def test_first_difference_decides(self) -> None:
        assert compare_lexicographic([b"a", b"z"], [b"b", b"a"]) is Ordering.LESS

    def test_equal(self) -> None:
        assert compare_lexicographic([b"a", b"b"], [b"a", b"b"]) is Ordering.EQUAL

    def test_prefix_sorts_first(self) -> None:
        assert compare_lexicographic([b"a"], [b"a", b"b"]) is Ordering.LESS

    def test_absent_sorts_least(self) -> None:
        assert compare_lexicographic([None], [b""]) is Ordering.LESS
        assert compare_lexicographic([None], [None]) is Ordering.EQUAL

    def test_numbers_compare_as_bytes(self) -> None:
        assert compare_lexicographic([b"10"], [b"9"]) is Ordering.LESS


@pytest.mark.unit
class TestNumeric:
    """Tests for numeric comparison."""

    def test_integers(self) -> None:
        assert compare_numeric([b"9"], [b"10"]) is Ordering.LESS
        assert compare_numeric([b"-3"], [b"-20"]) is Ordering.GREATER

    def test_floats_and_integers(self) -> None:
        assert compare_numeric([b"1.5"], [b"2"]) is Ordering.LESS
        assert compare_numeric([b"2.0"], [b"2"]) is Ordering.EQUAL
        assert compare_numeric([b"1e3"], [b"999"]) is Ordering.GREATER

    def test_nan_after_numbers(self) -> None:
        assert compare_numeric([b"NaN"], [b"inf"]) is Ordering.GREATER
        assert compare_numeric([b"nan"], [b"NaN"]) is Ordering.EQUAL

    def test_unparsable_falls_back_to_bytes(self) -> None:
        assert compare_numeric([b"abc"], [b"5"]) is Ordering.GREATER

    def test_parse_number(self) -> None:
        assert parse_number(b"42") == 42
        assert parse_number(b"-0.5") == -0.5
        assert parse_number(b"1_000") is None
        assert parse_number(b" 1") is None
        assert parse_number(None) is None


@pytest.mark.unit
class TestIgnoreCase:
    """Tests for case-folded comparison."""

    def test_case_folded(self) -> None:
        assert compare_ignore_case([b"ABC"], [b"abc"]) is Ordering.EQUAL
        assert compare_ignore_case([b"Apple"], [b"banana"]) is Ordering.LESS

    def test_invalid_utf8_sorts_least(self) -> None:
        assert compare_ignore_case([b"\xff"], [b"a"]) is Ordering.LESS


@pytest.mark.unit
class TestRecordComparator:
    """Tests for RecordComparator."""

    def test_compares_selected_fields_only(self) -> None:
        cmp = RecordComparator(ComparisonMode.LEXICOGRAPHIC, Selection((1,)))
        assert cmp.compare((b"z", b"a"), (b"a", b"a")) is Ordering.EQUAL

    def test_sort_key_matches_compare(self) -> None:
        cmp = RecordComparator(ComparisonMode.NUMERIC, Selection((0,)))
        records = [(b"10",), (b"9",), (b"100",)]
        assert sorted(records, key=cmp.sort_key()) == [(b"9",), (b"10",), (b"100",)]

    def test_mode_from_flags(self) -> None:
        assert ComparisonMode.from_flags() is ComparisonMode.LEXICOGRAPHIC
        assert ComparisonMode.from_flags(numeric=True) is ComparisonMode.NUMERIC
        assert ComparisonMode.from_flags(ignore_case=True) is ComparisonMode.IGNORE_CASE
        with pytest.raises(ConfigurationError):
            ComparisonMode.from_flags(numeric=True, ignore_case=True)
