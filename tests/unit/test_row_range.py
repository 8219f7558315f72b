"""Unit tests for RowRange resolution."""

from __future__ import annotations

import pytest

from tabular_engine.domain.value_objects import RowRange
from tabular_engine.ports.inbound.errors import ConfigurationError


def five() -> int:
    return 5


@pytest.mark.unit
class TestRowRangeResolve:
    """Tests for RowRange.resolve."""

    def test_defaults_to_everything(self) -> None:
        assert RowRange.resolve() == RowRange(0, None)

    def test_start_and_end(self) -> None:
        assert RowRange.resolve(start=1, end=3) == RowRange(1, 3)

    def test_start_and_length(self) -> None:
        assert RowRange.resolve(start=2, length=2) == RowRange(2, 4)

    def test_index(self) -> None:
        assert RowRange.resolve(index=3) == RowRange(3, 4)

    def test_negative_start_counts_from_end(self) -> None:
        assert RowRange.resolve(start=-2, row_count=five) == RowRange(3, None)

    def test_negative_index(self) -> None:
        assert RowRange.resolve(index=-1, row_count=five) == RowRange(4, 5)

    def test_negative_magnitude_clamps_to_zero(self) -> None:
        assert RowRange.resolve(start=-50, row_count=five) == RowRange(0, None)

    def test_row_count_only_called_when_needed(self) -> None:
        def explode() -> int:
            raise AssertionError("row count should not be needed")

        assert RowRange.resolve(start=1, row_count=explode) == RowRange(1, None)

    def test_index_with_other_parameters(self) -> None:
        with pytest.raises(ConfigurationError):
            RowRange.resolve(index=1, start=0)

    def test_end_with_length(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot be used at the same time"):
            RowRange.resolve(end=3, length=2)

    def test_start_after_end(self) -> None:
        with pytest.raises(ConfigurationError, match="greater than or equal"):
            RowRange.resolve(start=4, end=2)

    def test_negative_length(self) -> None:
        with pytest.raises(ConfigurationError):
            RowRange.resolve(length=-1)


@pytest.mark.unit
class TestRowRange:
    """Tests for RowRange helpers."""

    def test_empty(self) -> None:
        assert RowRange(2, 2).is_empty
        assert not RowRange(2, None).is_empty

    def test_contains(self) -> None:
        rng = RowRange(1, 3)
        assert [p for p in range(5) if rng.contains(p)] == [1, 2]
        assert RowRange(3, None).contains(1000)

    def test_clamp(self) -> None:
        assert RowRange(2, None).clamp(5) == RowRange(2, 5)
        assert RowRange(7, 9).clamp(5) == RowRange(5, 5)
        assert RowRange(1, 9).clamp(5) == RowRange(1, 5)
