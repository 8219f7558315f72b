"""Duplicate elimination.

Two execution modes share one adjacent-pair pass:

    SORTED    The input is trusted to be sorted by the comparator. One record
              is held, the next is read ahead and compared:
                  Equal   -> duplicate; the later record is discarded (and
                             sent to the duplicates sink); the held record stays
                  Less    -> the held record is emitted; the next one is held
                  Greater -> OrderViolationError; output so far stays valid
              At most two records are in memory at any time.

    UNSORTED  Every record is loaded, stably sorted in parallel, then passed
              through the same Equal/Less logic. Output is in sorted order,
              not input order.

The final held record is always emitted, so
``unique_count + dupe_count`` equals the number of input records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.services.comparators import RecordComparator
from tabular_engine.domain.services.parallelism import parallel_sort
from tabular_engine.domain.value_objects import DedupMode, Ordering
from tabular_engine.infrastructure.logging import get_logger
from tabular_engine.ports.inbound.errors import OrderViolationError
from tabular_engine.ports.outbound import RecordSink

logger = get_logger(__name__)


@dataclass(frozen=True)
class DedupResult:
    """Outcome of a duplicate-elimination run."""

    unique_count: int
    dupe_count: int

    @property
    def record_count(self) -> int:
        return self.unique_count + self.dupe_count


class DuplicateEliminator:
    """Removes adjacent-equal records under a comparator."""

    def __init__(
        self,
        comparator: RecordComparator,
        jobs: int = 1,
        chunk_min: int = 50000,
    ) -> None:
        """Initialize the eliminator.

        Args:
            comparator: Selection and comparison mode defining equality.
            jobs: Worker count for the unsorted-mode sort.
            chunk_min: Minimum records per parallel sort chunk.
        """
        self._comparator = comparator
        self._jobs = jobs
        self._chunk_min = chunk_min

    def run(
        self,
        mode: DedupMode,
        records: Iterable[ByteRecord],
        sink: RecordSink,
        dupes_sink: RecordSink | None = None,
    ) -> DedupResult:
        """Run duplicate elimination in the given mode."""
        handlers = {
            DedupMode.SORTED: self.run_sorted,
            DedupMode.UNSORTED: self.run_unsorted,
        }
        return handlers[mode](records, sink, dupes_sink)

    def run_sorted(
        self,
        records: Iterable[ByteRecord],
        sink: RecordSink,
        dupes_sink: RecordSink | None = None,
    ) -> DedupResult:
        """Streaming elimination over input already sorted by the comparator.

        Raises:
            OrderViolationError: On the first record that sorts before its
                predecessor.
        """
        return self._eliminate(iter(records), sink, dupes_sink, strict=True)

    def run_unsorted(
        self,
        records: Iterable[ByteRecord],
        sink: RecordSink,
        dupes_sink: RecordSink | None = None,
    ) -> DedupResult:
        """Load, sort, then eliminate. Output follows sorted order."""
        everything = list(records)
        logger.debug("dedup_sorting", records=len(everything), jobs=self._jobs)
        ordered = parallel_sort(everything, self._comparator, self._jobs, self._chunk_min)
        del everything
        return self._eliminate(iter(ordered), sink, dupes_sink, strict=False)

    def _eliminate(
        self,
        records: Iterator[ByteRecord],
        sink: RecordSink,
        dupes_sink: RecordSink | None,
        strict: bool,
    ) -> DedupResult:
        current = next(records, None)
        if current is None:
            return DedupResult(unique_count=0, dupe_count=0)

        unique_count = 0
        dupe_count = 0
        for candidate in records:
            ordering = self._comparator.compare(current, candidate)
            if ordering is Ordering.EQUAL:
                dupe_count += 1
                if dupes_sink is not None:
                    dupes_sink.write_record(candidate)
            elif ordering is Ordering.LESS or not strict:
                sink.write_record(current)
                unique_count += 1
                current = candidate
            else:
                raise OrderViolationError(
                    current,
                    candidate,
                    self._comparator.mode,
                    self._comparator.selection.indices,
                )

        sink.write_record(current)
        unique_count += 1
        return DedupResult(unique_count=unique_count, dupe_count=dupe_count)
