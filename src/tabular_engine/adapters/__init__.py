"""Adapters layer - concrete implementations of port interfaces.

Outbound adapters implement record I/O: delimited files, the side-car
index, memory-mapped views and the block codec.
"""

from tabular_engine.adapters.outbound import (
    BlockCodec,
    DelimitedReader,
    DelimitedWriter,
    FileOffsetIndex,
    IndexedReader,
    MappedView,
)

__all__ = [
    # Outbound adapters
    "DelimitedReader",
    "DelimitedWriter",
    "FileOffsetIndex",
    "IndexedReader",
    "MappedView",
    "BlockCodec",
]
