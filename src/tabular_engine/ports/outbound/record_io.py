"""Record I/O ports.

Operators consume records from a RecordSource and emit them to a
RecordSink. Sources that support random access additionally satisfy
IndexedSource.

References:
    - csv_index::RandomAccessSimple (one offset per record, O(1) seek)
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterable, Iterator, Protocol

from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.value_objects import Dialect


class RecordSource(Protocol):
    """Sequential source of byte records."""

    @property
    @abstractmethod
    def dialect(self) -> Dialect:
        """Return the dialect records are framed with."""
        ...

    @abstractmethod
    def byte_headers(self) -> ByteRecord:
        """Return the header record.

        For headerless sources this is the first record, which is still
        yielded by records(). Empty sources return an empty record.
        """
        ...

    @abstractmethod
    def read_record(self) -> ByteRecord | None:
        """Read the next data record, or None at end of input."""
        ...

    @abstractmethod
    def records(self) -> Iterator[ByteRecord]:
        """Iterate over the remaining data records."""
        ...


class RecordSink(Protocol):
    """Destination for byte records.

    Sinks must flush every buffered byte when closed, on every exit path.
    """

    @property
    @abstractmethod
    def records_written(self) -> int:
        """Return the number of records written so far."""
        ...

    @abstractmethod
    def write_record(self, record: Iterable[bytes]) -> None:
        """Write one record; fields may be produced lazily."""
        ...

    @abstractmethod
    def flush(self) -> None:
        """Push buffered bytes to the underlying stream."""
        ...


class IndexedSource(Protocol):
    """Record source with O(1) positioning by record number."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of data records (header excluded)."""
        ...

    @abstractmethod
    def seek(self, position: int) -> None:
        """Position the source so the next record read is ``position``.

        Raises:
            IndexOutOfRangeError: If ``position >= count()``.
        """
        ...

    @abstractmethod
    def byte_headers(self) -> ByteRecord:
        """Return the header record."""
        ...

    @abstractmethod
    def records(self) -> Iterator[ByteRecord]:
        """Iterate over records from the current position."""
        ...
