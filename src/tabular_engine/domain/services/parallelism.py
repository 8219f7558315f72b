"""Worker-pool sizing and parallel stable sorting.

Job counts are explicit parameters: every operator that parallelizes
receives its own count and owns its own pool for the duration of the call.
"""

from __future__ import annotations

import heapq
import os
from concurrent.futures import ProcessPoolExecutor
from itertools import repeat
from typing import Sequence

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.services.comparators import RecordComparator
from tabular_engine.domain.value_objects import ComparisonMode, Selection


def cpu_count() -> int:
    return os.cpu_count() or 1


def max_jobs(configured: int | None = None) -> int:
    """Upper bound on workers: the configured maximum if sane, else all CPUs."""
    cpus = cpu_count()
    if configured is not None and 1 <= configured <= cpus:
        return configured
    return cpus


def njobs(requested: int | None, configured_max: int | None = None) -> int:
    """Number of workers to use for a requested job count.

    None, zero, or more than the maximum all mean "use the maximum".

    Example:
        >>> njobs(1)
        1
    """
    limit = max_jobs(configured_max)
    if requested is None or requested <= 0 or requested > limit:
        return limit
    return requested


def io_reserved_jobs(jobs: int) -> int:
    """Leave one core for I/O when more than one is available."""
    return jobs - 1 if jobs > 1 else jobs


def _sort_chunk(
    chunk: list[ByteRecord], mode: ComparisonMode, indices: tuple[int, ...]
) -> list[ByteRecord]:
    comparator = RecordComparator(mode, Selection(indices))
    return sorted(chunk, key=comparator.sort_key())


def parallel_sort(
    records: Sequence[ByteRecord],
    comparator: RecordComparator,
    jobs: int,
    chunk_min: int = 50000,
) -> list[ByteRecord]:
    """Stable sort of records by the comparator, across a process pool.

    The input is cut into contiguous chunks, each sorted by one worker, and
    the sorted chunks are merged. Chunks are merged in input order, so
    records that compare equal keep their original relative order.

    Args:
        records: Records to sort.
        comparator: Ordering to sort by.
        jobs: Maximum number of worker processes.
        chunk_min: Inputs smaller than two chunks are sorted in-process.

    Returns:
        A new, sorted list.
    """
    key = comparator.sort_key()
    chunk_count = min(jobs, len(records) // max(chunk_min, 1))
    if chunk_count < 2:
        return sorted(records, key=key)

    size = -(-len(records) // chunk_count)
    chunks = [list(records[i : i + size]) for i in range(0, len(records), size)]

    with ProcessPoolExecutor(max_workers=len(chunks)) as pool:
        sorted_chunks = list(
            pool.map(
                _sort_chunk,
                chunks,
                repeat(comparator.mode),
                repeat(comparator.selection.indices),
            )
        )

    return list(heapq.merge(*sorted_chunks, key=key))
