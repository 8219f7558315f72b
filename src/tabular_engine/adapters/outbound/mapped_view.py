"""Read-only memory-mapped view of a source file."""

from __future__ import annotations

import io
import mmap
import os
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from tabular_engine.adapters.outbound.delimited import DelimitedReader
from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.value_objects import Dialect


class MappedView:
    """Scoped read-only mapping of a file.

    The mapping is released when the context exits, on every exit path.
    Empty files cannot be mapped and are served from an empty buffer.

    Example:
        >>> with MappedView("data.csv") as view:
        ...     first_line = view.buffer.readline()
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._buffer: mmap.mmap | io.BytesIO | None = None

    @property
    def buffer(self) -> BinaryIO:
        if self._buffer is None:
            raise RuntimeError("MappedView is not open")
        return self._buffer  # type: ignore[return-value]

    def open_records(self, dialect: Dialect) -> Callable[[], Iterator[ByteRecord]]:
        """Factory of independent full scans over the mapping.

        Each call rewinds the shared mapping; only the latest scan may be read.
        """

        def scan() -> Iterator[ByteRecord]:
            buffer = self.buffer
            buffer.seek(0)
            return DelimitedReader(buffer, dialect).records()

        return scan

    def __enter__(self) -> MappedView:
        with open(self._path, "rb") as handle:
            if os.fstat(handle.fileno()).st_size == 0:
                self._buffer = io.BytesIO(b"")
            else:
                self._buffer = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None
