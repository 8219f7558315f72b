"""Range slicing over record sources.

Two paths produce identical output for the same range:

    - linear: one forward scan, keeping records by position
    - indexed: seek straight to the range bounds through a random-access index

An empty range selects nothing, whether or not it is inverted.
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.value_objects import RowRange
from tabular_engine.ports.outbound import IndexedSource, RecordSink


class RangeSlicer:
    """Writes the records of a range (or of its complement) to a sink."""

    def __init__(self, row_range: RowRange, invert: bool = False) -> None:
        self._range = row_range
        self._invert = invert

    @property
    def row_range(self) -> RowRange:
        return self._range

    def linear(self, records: Iterable[ByteRecord], sink: RecordSink) -> int:
        """Slice by scanning; returns records written."""
        if self._range.is_empty:
            return 0

        if not self._invert:
            selected = islice(records, self._range.start, self._range.end)
            return _write_all(selected, sink)

        written = 0
        for position, record in enumerate(records):
            if not self._range.contains(position):
                sink.write_record(record)
                written += 1
        return written

    def indexed(self, source: IndexedSource, sink: RecordSink) -> int:
        """Slice by seeking; returns records written."""
        if self._range.is_empty:
            return 0

        count = source.count()
        bounds = self._range.clamp(count)

        if not self._invert:
            if bounds.end == bounds.start:
                return 0
            source.seek(bounds.start)
            return _write_all(islice(source.records(), bounds.end - bounds.start), sink)

        written = 0
        if bounds.start > 0:
            source.seek(0)
            written += _write_all(islice(source.records(), bounds.start), sink)
        if bounds.end < count:
            source.seek(bounds.end)
            written += _write_all(islice(source.records(), count - bounds.end), sink)
        return written


def _write_all(records: Iterable[ByteRecord], sink: RecordSink) -> int:
    written = 0
    for record in records:
        sink.write_record(record)
        written += 1
    return written
