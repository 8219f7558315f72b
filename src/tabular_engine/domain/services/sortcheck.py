"""Sortedness verification.

Streams adjacent record pairs through a comparator. A Greater result is a
break; an Equal result is a duplicate. Without an exhaustive report the scan
stops at the first break.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.services.comparators import RecordComparator
from tabular_engine.domain.value_objects import Ordering

MAX_BREAK_POSITIONS = 100


@dataclass(frozen=True)
class SortBreak:
    """First place where the input stops being sorted.

    ``position`` is the 0-based position of ``next``, the record that sorts
    before its predecessor ``current``.
    """

    position: int
    current: ByteRecord
    next: ByteRecord


@dataclass(frozen=True)
class SortCheckReport:
    """Result of a sortedness check."""

    sorted: bool
    record_count: int
    unsorted_breaks: int
    dupe_count: int
    first_break: SortBreak | None = None
    # first MAX_BREAK_POSITIONS breaks only
    break_positions: tuple[int, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict[str, Any]:
        """JSON-ready summary; dupe_count is -1 when the input is not sorted."""
        return {
            "sorted": self.sorted,
            "record_count": self.record_count,
            "unsorted_breaks": self.unsorted_breaks,
            "dupe_count": self.dupe_count if self.sorted else -1,
        }


class SortednessVerifier:
    """Checks that records are in the comparator's order."""

    def __init__(self, comparator: RecordComparator) -> None:
        self._comparator = comparator

    def verify(
        self,
        records: Iterable[ByteRecord],
        exhaustive: bool = False,
        max_positions: int = MAX_BREAK_POSITIONS,
    ) -> SortCheckReport:
        """Scan records and report on their order.

        Args:
            records: Data records, header excluded.
            exhaustive: Keep scanning past breaks, counting all of them.
            max_positions: Break positions kept in the report; the count
                covers every break.

        Returns:
            A report. ``record_count`` is the number of records scanned,
            which is every record unless the scan stopped at a break.
        """
        iterator = iter(records)
        current = next(iterator, None)
        if current is None:
            return SortCheckReport(sorted=True, record_count=0, unsorted_breaks=0, dupe_count=0)

        scanned = 1
        dupe_count = 0
        break_count = 0
        positions: list[int] = []
        first_break: SortBreak | None = None

        for position, candidate in enumerate(iterator, start=1):
            ordering = self._comparator.compare(current, candidate)
            if ordering is Ordering.EQUAL:
                dupe_count += 1
                scanned += 1
                continue
            if ordering is Ordering.GREATER:
                if first_break is None:
                    first_break = SortBreak(position, current, candidate)
                break_count += 1
                if len(positions) < max_positions:
                    positions.append(position)
                if not exhaustive:
                    break
            scanned += 1
            current = candidate

        return SortCheckReport(
            sorted=first_break is None,
            record_count=scanned,
            unsorted_breaks=break_count,
            dupe_count=dupe_count,
            first_break=first_break,
            break_positions=tuple(positions),
        )
