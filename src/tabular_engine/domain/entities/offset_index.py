"""Random-access index layout.

The index maps physical record numbers to the byte offset where each record
starts in its source. It is created once by a full scan and read-only after.

File Format:
    - Header (16 bytes): magic (8), entry_count (8)
    - Entries: entry_count x offset (8 bytes, big-endian unsigned)

There is one entry per physical record, the header record included, so the
logical record count is ``entry_count - 1`` for sources with headers.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from tabular_engine.ports.inbound.errors import IndexUnavailableError


INDEX_MAGIC = b"TEIDX\x00\x00\x01"


@dataclass(frozen=True)
class IndexHeader:
    """Fixed-size header at the start of every index file.

    Size: 16 bytes
        - magic: 8 bytes
        - entry_count: 8 bytes (uint64)
    """

    entry_count: int

    HEADER_SIZE: ClassVar[int] = 16
    HEADER_FORMAT: ClassVar[str] = ">8sQ"
    ENTRY_SIZE: ClassVar[int] = 8
    ENTRY_FORMAT: ClassVar[str] = ">Q"

    def to_bytes(self) -> bytes:
        """Serialize header to bytes."""
        return struct.pack(self.HEADER_FORMAT, INDEX_MAGIC, self.entry_count)

    @classmethod
    def from_bytes(cls, data: bytes) -> IndexHeader:
        """Deserialize header from bytes.

        Raises:
            IndexUnavailableError: If the data is short or not an index header.
        """
        if len(data) < cls.HEADER_SIZE:
            raise IndexUnavailableError(
                f"IndexHeader requires {cls.HEADER_SIZE} bytes, got {len(data)}"
            )

        magic, entry_count = struct.unpack(cls.HEADER_FORMAT, data[: cls.HEADER_SIZE])
        if magic != INDEX_MAGIC:
            raise IndexUnavailableError(f"Invalid index magic: {magic!r}")

        return cls(entry_count=entry_count)

    def expected_file_size(self) -> int:
        """Total size of a complete index file with this header."""
        return self.HEADER_SIZE + self.entry_count * self.ENTRY_SIZE

    def entry_position(self, physical: int) -> int:
        """Byte position of the entry for a physical record number."""
        return self.HEADER_SIZE + physical * self.ENTRY_SIZE

    def logical_count(self, has_headers: bool) -> int:
        """Number of data records, header excluded."""
        if has_headers and self.entry_count > 0:
            return self.entry_count - 1
        return self.entry_count


def encode_offset(offset: int) -> bytes:
    return struct.pack(IndexHeader.ENTRY_FORMAT, offset)


def decode_offset(data: bytes) -> int:
    (offset,) = struct.unpack(IndexHeader.ENTRY_FORMAT, data)
    return offset
