"""Closed mode types shared by every operator that dispatches on them.

Each enum is the single point of truth for its variants; operators map a
variant to a handler instead of repeating flag checks.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from tabular_engine.ports.inbound.errors import ConfigurationError


class Ordering(IntEnum):
    """Result of a three-way comparison."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


class ComparisonMode(Enum):
    """How selected fields of two records are ordered.

    LEXICOGRAPHIC: raw byte order, field by field
    NUMERIC: parsed numbers where both sides parse, byte order otherwise
    IGNORE_CASE: lowercased UTF-8 text; undecodable fields sort least
    """

    LEXICOGRAPHIC = "lexicographic"
    NUMERIC = "numeric"
    IGNORE_CASE = "ignore_case"

    @classmethod
    def from_flags(cls, numeric: bool = False, ignore_case: bool = False) -> ComparisonMode:
        """Map the numeric / ignore-case switches to a mode.

        Raises:
            ConfigurationError: If both switches are set.
        """
        if numeric and ignore_case:
            raise ConfigurationError("numeric and ignore-case comparison cannot be combined")
        if numeric:
            return cls.NUMERIC
        if ignore_case:
            return cls.IGNORE_CASE
        return cls.LEXICOGRAPHIC


class DedupMode(Enum):
    """Duplicate-elimination execution modes.

    SORTED: single forward pass over input already sorted by the comparator
    UNSORTED: load, sort, then eliminate; output is in sorted order
    """

    SORTED = "sorted"
    UNSORTED = "unsorted"

    @classmethod
    def from_flag(cls, sorted_input: bool) -> DedupMode:
        return cls.SORTED if sorted_input else cls.UNSORTED


class TransposeStrategy(Enum):
    """Transpose execution strategies.

    AUTO: in-memory unless the memory gate refuses, then multipass
    IN_MEMORY: hold every record, emit one output row per column
    MULTIPASS: one memory-mapped scan of the source per output row
    """

    AUTO = "auto"
    IN_MEMORY = "in_memory"
    MULTIPASS = "multipass"
