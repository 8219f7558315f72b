"""Value objects for the tabular engine domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Modes:
        - Ordering: Three-way comparison result
        - ComparisonMode: Lexicographic, numeric or case-folded ordering
        - DedupMode: Sorted (streaming) or unsorted duplicate elimination
        - TransposeStrategy: In-memory, multipass or automatic transpose

    Records:
        - Dialect: Delimiter, header and quote settings
        - Selection: Resolved field positions
        - RowRange: Half-open range of record positions
"""

from tabular_engine.domain.value_objects.dialect import Dialect
from tabular_engine.domain.value_objects.modes import (
    ComparisonMode,
    DedupMode,
    Ordering,
    TransposeStrategy,
)
from tabular_engine.domain.value_objects.row_range import RowRange
from tabular_engine.domain.value_objects.selection import Selection

__all__ = [
    # Modes
    "Ordering",
    "ComparisonMode",
    "DedupMode",
    "TransposeStrategy",
    # Records
    "Dialect",
    "Selection",
    "RowRange",
]
