"""Delimited-record reader and writer over binary streams.

The reader implements RecordSource and the writer implements RecordSink.
Field bytes pass through unchanged: quoted fields are parsed with the
standard csv module over a latin-1 view of the line, which maps every byte
to one code point and back.

Reading:
    - records end at ``\\n`` or ``\\r\\n`` outside quotes
    - a quoted field may span lines; ``""`` inside quotes is one quote
    - blank lines are skipped
    - the byte offset of each record start is tracked for indexing

Writing:
    - a field is quoted only if it holds the delimiter, a quote, CR or LF
    - a record of one empty field is written as ``""``
    - records end with ``\\n``
"""

from __future__ import annotations

import csv
import io
from contextlib import contextmanager
from typing import BinaryIO, Iterable, Iterator

from tabular_engine.adapters.outbound.streams import (
    Location,
    open_binary_input,
    open_binary_output,
)
from tabular_engine.domain.entities import EMPTY_RECORD, ByteRecord
from tabular_engine.domain.value_objects import Dialect

_END = object()


class DelimitedReader:
    """Sequential reader of delimited records.

    Attributes:
        dialect: Framing of the source.
        position: Byte offset of the next unread record.
    """

    def __init__(self, stream: BinaryIO, dialect: Dialect, position: int = 0) -> None:
        self._stream = stream
        self._dialect = dialect
        self._position = position
        self._headers: ByteRecord | None = None
        self._pending: ByteRecord | None = None
        self._text_delimiter = dialect.delimiter.decode("latin-1")
        self._text_quote = dialect.quote.decode("latin-1")

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def position(self) -> int:
        return self._position

    def byte_headers(self) -> ByteRecord:
        if self._headers is None:
            first = self._next_physical()
            self._headers = EMPTY_RECORD if first is None else first[1]
            if not self._dialect.has_headers and first is not None:
                self._pending = first[1]
        return self._headers

    def read_record(self) -> ByteRecord | None:
        self.byte_headers()
        if self._pending is not None:
            record, self._pending = self._pending, None
            return record
        physical = self._next_physical()
        return None if physical is None else physical[1]

    def records(self) -> Iterator[ByteRecord]:
        while True:
            record = self.read_record()
            if record is None:
                return
            yield record

    def count_records(self) -> int:
        """Count the remaining data records."""
        return sum(1 for _ in self.records())

    def seek(self, offset: int) -> None:
        """Reposition to a record start; headers are kept, buffered records dropped."""
        self.byte_headers()
        self._stream.seek(offset)
        self._position = offset
        self._pending = None

    def scan_offsets(self) -> Iterator[int]:
        """Yield the start offset of every physical record, header included.

        Must be called on a fresh reader.
        """
        while True:
            physical = self._next_physical()
            if physical is None:
                return
            yield physical[0]

    def _next_physical(self) -> tuple[int, ByteRecord] | None:
        readline = self._stream.readline
        line = readline()
        while line in (b"\n", b"\r\n"):
            self._position += len(line)
            line = readline()
        if not line:
            return None

        start = self._position
        self._position += len(line)
        quoted = self._dialect.quote in line and self._ends_quoted(line, False)
        while quoted:
            more = readline()
            if not more:
                break
            self._position += len(more)
            line += more
            quoted = self._ends_quoted(more, True)

        if line.endswith(b"\r\n"):
            line = line[:-2]
        elif line.endswith(b"\n"):
            line = line[:-1]

        return start, self._parse(line)

    def _ends_quoted(self, chunk: bytes, quoted: bool) -> bool:
        """Whether a quoted field is still open at the end of ``chunk``.

        A quote opens a field only as its first byte; elsewhere in an
        unquoted field it is literal. Inside a quoted field ``""`` is an
        escaped quote and a lone quote closes the field.
        """
        quote = self._dialect.quote
        delimiter = self._dialect.delimiter
        i = 0
        end = len(chunk)
        while i < end:
            if quoted:
                j = chunk.find(quote, i)
                if j < 0:
                    return True
                if chunk[j + 1 : j + 2] == quote:
                    i = j + 2
                    continue
                quoted = False
                i = j + 1
            elif chunk[i : i + 1] == quote:
                quoted = True
                i += 1
                continue
            # rest of the field is literal; the next field starts after the delimiter
            j = chunk.find(delimiter, i)
            if j < 0:
                return False
            i = j + 1
        return quoted

    def _parse(self, line: bytes) -> ByteRecord:
        if self._dialect.quote not in line:
            return tuple(line.split(self._dialect.delimiter))
        reader = csv.reader(
            io.StringIO(line.decode("latin-1"), newline=""),
            delimiter=self._text_delimiter,
            quotechar=self._text_quote,
            doublequote=True,
            strict=False,
        )
        return tuple(field.encode("latin-1") for field in next(reader, []))


class DelimitedWriter:
    """Writes records with minimal quoting."""

    def __init__(self, stream: BinaryIO, dialect: Dialect) -> None:
        self._stream = stream
        self._delimiter = dialect.delimiter
        self._quote = dialect.quote
        self._escaped_quote = dialect.quote * 2
        self._special = (dialect.delimiter, dialect.quote, b"\r", b"\n")
        self._records_written = 0

    @property
    def records_written(self) -> int:
        return self._records_written

    def write_record(self, record: Iterable[bytes]) -> None:
        write = self._stream.write
        fields = iter(record)
        first = next(fields, _END)
        second = next(fields, _END) if first is not _END else _END

        if second is _END and first in (_END, b""):
            write(self._quote * 2)
        else:
            write(self._quoted(first))
            if second is not _END:
                write(self._delimiter)
                write(self._quoted(second))
                for field in fields:
                    write(self._delimiter)
                    write(self._quoted(field))
        write(b"\n")
        self._records_written += 1

    def write_records(self, records: Iterable[Iterable[bytes]]) -> int:
        written = 0
        for record in records:
            self.write_record(record)
            written += 1
        return written

    def flush(self) -> None:
        self._stream.flush()

    def _quoted(self, field: bytes) -> bytes:
        if any(token in field for token in self._special):
            return self._quote + field.replace(self._quote, self._escaped_quote) + self._quote
        return field

    def __enter__(self) -> DelimitedWriter:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.flush()


@contextmanager
def open_reader(
    location: Location, dialect: Dialect, buffer_size: int = -1
) -> Iterator[DelimitedReader]:
    """Open a path (or stdin) as a record source."""
    with open_binary_input(location, buffer_size) as stream:
        yield DelimitedReader(stream, dialect)


@contextmanager
def open_writer(
    location: Location, dialect: Dialect, buffer_size: int = -1
) -> Iterator[DelimitedWriter]:
    """Open a path (or stdout) as a record sink; flushed on every exit path."""
    with open_binary_output(location, buffer_size) as stream:
        with DelimitedWriter(stream, dialect) as writer:
            yield writer
