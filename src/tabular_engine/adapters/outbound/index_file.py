"""File-based random-access index.

Stores one big-endian u64 offset per physical record of a delimited source
in a side-car file (``<source>.idx`` by default).

Index File Format:
    - Header (16 bytes): magic, entry_count
    - Entries: entry_count x offset (8 bytes)

Durability:
    The index is written to a temporary file in the destination directory,
    fsynced, then renamed over the destination. Readers see either the old
    file or a complete new one.

References:
    - csv_index::RandomAccessSimple
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from tabular_engine.adapters.outbound.delimited import DelimitedReader
from tabular_engine.adapters.outbound.streams import Location, is_stdio
from tabular_engine.domain.entities import ByteRecord, IndexHeader, decode_offset, encode_offset
from tabular_engine.domain.value_objects import Dialect
from tabular_engine.infrastructure.logging import get_logger
from tabular_engine.ports.inbound.errors import (
    ConfigurationError,
    IndexOutOfRangeError,
    IndexUnavailableError,
)

logger = get_logger(__name__)


def default_index_path(source: str | Path, suffix: str = ".idx") -> Path:
    """Side-car index location for a source file."""
    return Path(f"{source}{suffix}")


class FileOffsetIndex:
    """Read-only view of a persisted offset index.

    Offsets are read one entry at a time; the index is never loaded whole.
    """

    def __init__(self, handle: BinaryIO, header: IndexHeader, path: Path) -> None:
        self._handle = handle
        self._header = header
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def entry_count(self) -> int:
        return self._header.entry_count

    def logical_count(self, has_headers: bool) -> int:
        return self._header.logical_count(has_headers)

    def get(self, physical: int) -> int:
        """Offset of a physical record (0 is the header when present)."""
        if not 0 <= physical < self._header.entry_count:
            raise IndexOutOfRangeError(physical, self._header.entry_count)
        self._handle.seek(self._header.entry_position(physical))
        return decode_offset(self._handle.read(IndexHeader.ENTRY_SIZE))

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> FileOffsetIndex:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @classmethod
    def create(
        cls,
        source: Location,
        dialect: Dialect,
        index_path: str | Path | None = None,
        buffer_size: int = -1,
    ) -> int:
        """Scan a source file and persist its offsets.

        Args:
            source: Path of the delimited source.
            dialect: Framing of the source.
            index_path: Destination (default ``<source>.idx``).
            buffer_size: Read buffer size for the scan.

        Returns:
            Number of entries written (physical records, header included).

        Raises:
            ConfigurationError: If the source is standard input.
        """
        if is_stdio(source):
            raise ConfigurationError("cannot create an index for standard input")

        destination = Path(index_path) if index_path is not None else default_index_path(source)
        destination.parent.mkdir(parents=True, exist_ok=True)

        tmp = tempfile.NamedTemporaryFile(
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        )
        try:
            with tmp:
                tmp.write(IndexHeader(entry_count=0).to_bytes())
                entry_count = 0
                with open(source, "rb", buffering=buffer_size) as stream:
                    for offset in DelimitedReader(stream, dialect).scan_offsets():
                        tmp.write(encode_offset(offset))
                        entry_count += 1
                tmp.seek(0)
                tmp.write(IndexHeader(entry_count=entry_count).to_bytes())
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp.name, destination)
        except BaseException:
            Path(tmp.name).unlink(missing_ok=True)
            raise

        logger.info("index_created", source=str(source), index=str(destination), entries=entry_count)
        return entry_count

    @classmethod
    def open(cls, index_path: str | Path) -> FileOffsetIndex:
        """Open a persisted index.

        The index is not checked against its source; staleness goes undetected.

        Raises:
            IndexUnavailableError: If the file is missing, truncated or malformed.
        """
        path = Path(index_path)
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise IndexUnavailableError(f"cannot open index {path}: {e}") from e

        try:
            header = IndexHeader.from_bytes(handle.read(IndexHeader.HEADER_SIZE))
            actual = os.fstat(handle.fileno()).st_size
            if actual != header.expected_file_size():
                raise IndexUnavailableError(
                    f"index {path} is {actual} bytes, header claims "
                    f"{header.entry_count} entries ({header.expected_file_size()} bytes)"
                )
        except BaseException:
            handle.close()
            raise

        return cls(handle, header, path)


class IndexedReader:
    """Delimited reader with O(1) seek by data record position."""

    def __init__(self, reader: DelimitedReader, index: FileOffsetIndex) -> None:
        self._reader = reader
        self._index = index
        self._has_headers = reader.dialect.has_headers

    @property
    def dialect(self) -> Dialect:
        return self._reader.dialect

    def count(self) -> int:
        return self._index.logical_count(self._has_headers)

    def seek(self, position: int) -> None:
        count = self.count()
        if position < 0 or position >= count:
            raise IndexOutOfRangeError(position, count)
        physical = position + 1 if self._has_headers else position
        self._reader.seek(self._index.get(physical))

    def byte_headers(self) -> ByteRecord:
        return self._reader.byte_headers()

    def read_record(self) -> ByteRecord | None:
        return self._reader.read_record()

    def records(self) -> Iterator[ByteRecord]:
        return self._reader.records()


@contextmanager
def open_indexed(
    source: str | Path,
    dialect: Dialect,
    index_path: str | Path | None = None,
    buffer_size: int = -1,
) -> Iterator[IndexedReader]:
    """Open a source together with its index.

    Raises:
        IndexUnavailableError: If the index cannot be used.
    """
    path = Path(index_path) if index_path is not None else default_index_path(source)
    with FileOffsetIndex.open(path) as index:
        with open(source, "rb", buffering=buffer_size) as stream:
            reader = DelimitedReader(stream, dialect)
            reader.byte_headers()
            yield IndexedReader(reader, index)
