"""Operator parameters.

Each operator takes one options object. Locations are paths, or None / "-"
for the process's standard streams.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tabular_engine.domain.value_objects import TransposeStrategy

PathLike = str | Path | None


@dataclass(frozen=True, kw_only=True)
class SourceOptions:
    """How to read the input.

    Attributes:
        input: Source location; None or "-" reads standard input.
        delimiter: Field delimiter override (``\\t`` accepted); None picks
            tab for .tsv/.tab inputs and the configured default otherwise.
        no_headers: Treat the first record as data.
    """

    input: PathLike = None
    delimiter: str | None = None
    no_headers: bool = False


@dataclass(frozen=True, kw_only=True)
class DedupOptions(SourceOptions):
    """Duplicate elimination.

    Attributes:
        select: Selection expression; None compares whole records.
        numeric: Compare selected fields as numbers.
        ignore_case: Compare selected fields case-insensitively.
        sorted: Input is already sorted; stream it in one pass.
        memcheck: Run the memory gate before loading unsorted input.
        jobs: Worker count for the unsorted sort (None for all CPUs).
        output: Destination of unique records.
        dupes_output: Optional destination of discarded duplicates.
    """

    select: str | None = None
    numeric: bool = False
    ignore_case: bool = False
    sorted: bool = False
    memcheck: bool = False
    jobs: int | None = None
    output: PathLike = None
    dupes_output: PathLike = None


@dataclass(frozen=True, kw_only=True)
class SortCheckOptions(SourceOptions):
    """Sortedness check.

    Attributes:
        all: Scan the whole input and count every break.
    """

    select: str | None = None
    numeric: bool = False
    ignore_case: bool = False
    all: bool = False


@dataclass(frozen=True, kw_only=True)
class TransposeOptions(SourceOptions):
    strategy: TransposeStrategy = TransposeStrategy.AUTO
    memcheck: bool = False
    output: PathLike = None


@dataclass(frozen=True, kw_only=True)
class SliceOptions(SourceOptions):
    """Range slicing.

    Attributes:
        start: First record (negative counts from the end).
        end: Record after the last one (exclusive).
        length: Number of records, instead of ``end``.
        index: Single record (negative counts from the end).
        invert: Emit everything outside the range.
        require_index: Fail instead of scanning when the index is unusable.
        index_path: Index location (default ``<input>.idx``).
    """

    start: int | None = None
    end: int | None = None
    length: int | None = None
    index: int | None = None
    invert: bool = False
    require_index: bool = False
    index_path: PathLike = None
    output: PathLike = None


@dataclass(frozen=True, kw_only=True)
class CodecOptions:
    input: PathLike = None
    output: PathLike = None
    jobs: int | None = None
    block_size: int | None = None
