"""Comparison strategies over selected fields.

Every strategy walks two field sequences in selection order and returns
the first non-equal field comparison. A sequence that is a prefix of the
other sorts first, and absent fields (None) sort before present ones.

The strategy table is keyed by ComparisonMode and shared by every
order-sensitive operator, so dedup, sortcheck and sorting cannot drift.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Sequence

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.value_objects import ComparisonMode, Ordering, Selection


Fields = Sequence["bytes | None"]
FieldComparator = Callable[["bytes | None", "bytes | None"], Ordering]

_INT_RE = re.compile(rb"[+-]?[0-9]+\Z")
_FLOAT_RE = re.compile(
    rb"[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?"
    rb"|inf|infinity|nan)\Z",
    re.IGNORECASE,
)


def _order(a: Any, b: Any) -> Ordering:
    if a < b:
        return Ordering.LESS
    if a > b:
        return Ordering.GREATER
    return Ordering.EQUAL


def _compare_absent(a: object | None, b: object | None) -> Ordering | None:
    """Order absent values first; None when both are present."""
    if a is None:
        return Ordering.EQUAL if b is None else Ordering.LESS
    if b is None:
        return Ordering.GREATER
    return None


def _compare_bytes(a: bytes | None, b: bytes | None) -> Ordering:
    absent = _compare_absent(a, b)
    if absent is not None:
        return absent
    return _order(a, b)


def parse_number(field: bytes | None) -> int | float | None:
    """Parse a field as an integer or float; None if it is not a number."""
    if field is None:
        return None
    if _INT_RE.match(field):
        return int(field)
    if _FLOAT_RE.match(field):
        return float(field)
    return None


def _compare_numeric(a: bytes | None, b: bytes | None) -> Ordering:
    x = parse_number(a)
    y = parse_number(b)
    if x is None or y is None:
        return _compare_bytes(a, b)
    x_nan = isinstance(x, float) and math.isnan(x)
    y_nan = isinstance(y, float) and math.isnan(y)
    if x_nan or y_nan:
        # NaN sorts after every number and equal to itself
        return _order(x_nan, y_nan)
    return _order(x, y)


def _fold(field: bytes | None) -> str | None:
    if field is None:
        return None
    try:
        return field.decode("utf-8").lower()
    except UnicodeDecodeError:
        return None


def _compare_folded(a: bytes | None, b: bytes | None) -> Ordering:
    x = _fold(a)
    y = _fold(b)
    absent = _compare_absent(x, y)
    if absent is not None:
        return absent
    return _order(x, y)


def _iter_cmp(a: Fields, b: Fields, field_cmp: FieldComparator) -> Ordering:
    for x, y in zip(a, b):
        result = field_cmp(x, y)
        if result is not Ordering.EQUAL:
            return result
    return _order(len(a), len(b))


def compare_lexicographic(a: Fields, b: Fields) -> Ordering:
    """Byte-lexicographic comparison of two field sequences."""
    return _iter_cmp(a, b, _compare_bytes)


def compare_numeric(a: Fields, b: Fields) -> Ordering:
    """Numeric comparison; fields that do not parse fall back to byte order."""
    return _iter_cmp(a, b, _compare_numeric)


def compare_ignore_case(a: Fields, b: Fields) -> Ordering:
    """Case-folded comparison; undecodable fields sort least."""
    return _iter_cmp(a, b, _compare_folded)


COMPARATORS: dict[ComparisonMode, Callable[[Fields, Fields], Ordering]] = {
    ComparisonMode.LEXICOGRAPHIC: compare_lexicographic,
    ComparisonMode.NUMERIC: compare_numeric,
    ComparisonMode.IGNORE_CASE: compare_ignore_case,
}


@dataclass(frozen=True)
class RecordComparator:
    """Compares whole records on their selected fields.

    Example:
        >>> cmp = RecordComparator(ComparisonMode.NUMERIC, Selection((0,)))
        >>> cmp.compare((b"9",), (b"10",))
        <Ordering.LESS: -1>
    """

    mode: ComparisonMode
    selection: Selection

    def compare(self, a: ByteRecord, b: ByteRecord) -> Ordering:
        return COMPARATORS[self.mode](self.selection.select(a), self.selection.select(b))

    def sort_key(self) -> Callable[[ByteRecord], Any]:
        """Key function ordering records exactly as compare() does."""
        return cmp_to_key(self.compare)
