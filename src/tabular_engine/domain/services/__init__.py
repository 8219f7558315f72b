"""Domain services - the record operators and their policies.

Exports:
    Comparison:
        - RecordComparator: Compares records on selected fields
        - COMPARATORS: Strategy table keyed by ComparisonMode
        - parse_number: Numeric field parsing

    Memory:
        - MemoryPolicyGate: Point-in-time in-memory feasibility check
        - Proceed, Abort, MemorySnapshot: Gate decision values

    Operators:
        - DuplicateEliminator, DedupResult
        - SortednessVerifier, SortCheckReport, SortBreak
        - TransposeEngine
        - RangeSlicer

    Parallelism:
        - njobs, max_jobs, io_reserved_jobs, parallel_sort
"""

from tabular_engine.domain.services.comparators import (
    COMPARATORS,
    RecordComparator,
    compare_ignore_case,
    compare_lexicographic,
    compare_numeric,
    parse_number,
)
from tabular_engine.domain.services.dedup import DedupResult, DuplicateEliminator
from tabular_engine.domain.services.memory_gate import (
    Abort,
    MemoryDecision,
    MemoryPolicyGate,
    MemorySnapshot,
    Proceed,
    psutil_snapshot,
)
from tabular_engine.domain.services.parallelism import (
    io_reserved_jobs,
    max_jobs,
    njobs,
    parallel_sort,
)
from tabular_engine.domain.services.slicer import RangeSlicer
from tabular_engine.domain.services.sortcheck import SortBreak, SortCheckReport, SortednessVerifier
from tabular_engine.domain.services.transpose import TransposeEngine

__all__ = [
    # Comparison
    "RecordComparator",
    "COMPARATORS",
    "compare_lexicographic",
    "compare_numeric",
    "compare_ignore_case",
    "parse_number",
    # Memory
    "MemoryPolicyGate",
    "MemoryDecision",
    "MemorySnapshot",
    "Proceed",
    "Abort",
    "psutil_snapshot",
    # Operators
    "DuplicateEliminator",
    "DedupResult",
    "SortednessVerifier",
    "SortCheckReport",
    "SortBreak",
    "TransposeEngine",
    "RangeSlicer",
    # Parallelism
    "njobs",
    "max_jobs",
    "io_reserved_jobs",
    "parallel_sort",
]
