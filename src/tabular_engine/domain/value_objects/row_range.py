"""Record ranges for slicing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from tabular_engine.ports.inbound.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RowRange:
    """Half-open range ``[start, end)`` of logical record positions.

    ``end`` is None for a range that runs to the last record.

    Example:
        >>> RowRange.resolve(start=2, length=3)
        RowRange(start=2, end=5)
        >>> RowRange(1, 3).contains(3)
        False
    """

    start: int
    end: int | None

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ConfigurationError(f"range start must be non-negative, got {self.start}")
        if self.end is not None and self.end < self.start:
            raise ConfigurationError(
                f"The end of the range ({self.end}) must be greater than or "
                f"equal to the start of the range ({self.start})."
            )

    @property
    def is_empty(self) -> bool:
        return self.end is not None and self.end == self.start

    def contains(self, position: int) -> bool:
        return position >= self.start and (self.end is None or position < self.end)

    def clamp(self, count: int) -> RowRange:
        """Bound the range to ``count`` records."""
        start = min(self.start, count)
        end = count if self.end is None else min(self.end, count)
        return RowRange(start, max(start, end))

    @classmethod
    def resolve(
        cls,
        start: int | None = None,
        end: int | None = None,
        length: int | None = None,
        index: int | None = None,
        row_count: Callable[[], int] | None = None,
    ) -> RowRange:
        """Turn slicing parameters into a range.

        Negative ``start`` or ``index`` count back from the last record and
        need ``row_count``; it is only called in that case. Offsets reaching
        past the first record clamp to 0.

        Raises:
            ConfigurationError: On conflicting parameter combinations.
        """
        if index is not None:
            if start is not None or end is not None or length is not None:
                raise ConfigurationError("index cannot be used with start, end or len")
            position = _from_end(index, row_count)
            return cls(position, position + 1)

        if end is not None and length is not None:
            raise ConfigurationError("end and len cannot be used at the same time.")
        if end is not None and end < 0:
            raise ConfigurationError(f"end must be non-negative, got {end}")
        if length is not None and length < 0:
            raise ConfigurationError(f"len must be non-negative, got {length}")

        first = _from_end(start, row_count) if start is not None else 0
        if end is not None:
            return cls(first, end)
        if length is not None:
            return cls(first, first + length)
        return cls(first, None)


def _from_end(value: int, row_count: Callable[[], int] | None) -> int:
    if value >= 0:
        return value
    if row_count is None:
        raise ConfigurationError("a negative position needs the record count")
    return max(0, row_count() + value)
