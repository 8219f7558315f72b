"""Matrix transpose of delimited records.

Output row ``i`` holds field ``i`` of every input record, in input order.
The output width count comes from the first record; records too short to
have field ``i`` contribute nothing to output row ``i``.

Strategies:
    IN_MEMORY  Hold every record, then pull one column per output row.
    MULTIPASS  Re-scan the source once per output row, keeping only the
               record being read. ``open_records`` must return a fresh
               iterator over the whole source on every call.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.value_objects import TransposeStrategy
from tabular_engine.infrastructure.logging import get_logger
from tabular_engine.ports.inbound.errors import ConfigurationError
from tabular_engine.ports.outbound import RecordSink

logger = get_logger(__name__)

RecordOpener = Callable[[], Iterator[ByteRecord]]


def _column(records: Iterable[ByteRecord], i: int) -> Iterator[bytes]:
    return (record[i] for record in records if i < len(record))


class TransposeEngine:
    """Transposes records into a sink."""

    def run(
        self,
        strategy: TransposeStrategy,
        open_records: RecordOpener,
        sink: RecordSink,
    ) -> int:
        """Transpose with an explicit strategy; returns output rows written."""
        if strategy is TransposeStrategy.IN_MEMORY:
            return self.in_memory(open_records(), sink)
        if strategy is TransposeStrategy.MULTIPASS:
            return self.multipass(open_records, sink)
        raise ConfigurationError(f"transpose strategy {strategy.value} must be resolved first")

    def in_memory(self, records: Iterable[ByteRecord], sink: RecordSink) -> int:
        rows = list(records)
        if not rows:
            return 0
        width = len(rows[0])
        for i in range(width):
            sink.write_record(_column(rows, i))
        return width

    def multipass(self, open_records: RecordOpener, sink: RecordSink) -> int:
        first = next(open_records(), None)
        if first is None:
            return 0
        width = len(first)
        logger.debug("transpose_multipass", passes=width)
        for i in range(width):
            sink.write_record(_column(open_records(), i))
        return width
