"""Domain entities for the tabular engine.

Exports:
    Record:
        - ByteRecord: Immutable tuple of raw byte fields
        - RecordPosition: 0-based data record position
        - EMPTY_RECORD: The zero-field record

    Offset Index:
        - IndexHeader: 16-byte header of a side-car index file
        - INDEX_MAGIC: Magic bytes identifying index files
        - encode_offset, decode_offset: Entry (de)serialization
"""

from tabular_engine.domain.entities.offset_index import (
    INDEX_MAGIC,
    IndexHeader,
    decode_offset,
    encode_offset,
)
from tabular_engine.domain.entities.record import EMPTY_RECORD, ByteRecord, RecordPosition

__all__ = [
    # Record
    "ByteRecord",
    "RecordPosition",
    "EMPTY_RECORD",
    # Offset index
    "IndexHeader",
    "INDEX_MAGIC",
    "encode_offset",
    "decode_offset",
]
