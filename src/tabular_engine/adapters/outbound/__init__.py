"""Outbound adapters - implementations of outbound ports.

Exports:
    - DelimitedReader, DelimitedWriter: RecordSource / RecordSink over byte streams
    - FileOffsetIndex, IndexedReader: side-car random-access index
    - MappedView: scoped read-only memory map
    - BlockCodec, CodecStats: parallel zstandard block container
"""

from tabular_engine.adapters.outbound.block_codec import (
    CONTAINER_MAGIC,
    MIN_BLOCK_SIZE,
    BlockCodec,
    CodecStats,
)
from tabular_engine.adapters.outbound.delimited import (
    DelimitedReader,
    DelimitedWriter,
    open_reader,
    open_writer,
)
from tabular_engine.adapters.outbound.index_file import (
    FileOffsetIndex,
    IndexedReader,
    default_index_path,
    open_indexed,
)
from tabular_engine.adapters.outbound.mapped_view import MappedView
from tabular_engine.adapters.outbound.streams import (
    is_stdio,
    open_binary_input,
    open_binary_output,
)

__all__ = [
    "DelimitedReader",
    "DelimitedWriter",
    "open_reader",
    "open_writer",
    "FileOffsetIndex",
    "IndexedReader",
    "default_index_path",
    "open_indexed",
    "MappedView",
    "BlockCodec",
    "CodecStats",
    "CONTAINER_MAGIC",
    "MIN_BLOCK_SIZE",
    "is_stdio",
    "open_binary_input",
    "open_binary_output",
]
