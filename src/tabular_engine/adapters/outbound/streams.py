"""Byte stream endpoints: files or the process's standard streams.

A location of None or ``"-"`` means standard input (for sources) or
standard output (for destinations). Standard streams are never closed.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

STDIO = "-"

Location = str | Path | None


def is_stdio(location: Location) -> bool:
    return location is None or str(location) == STDIO


@contextmanager
def open_binary_input(location: Location, buffer_size: int = -1) -> Iterator[BinaryIO]:
    """Open a source for binary reading."""
    if is_stdio(location):
        yield sys.stdin.buffer
        return
    with open(location, "rb", buffering=buffer_size) as handle:
        yield handle


@contextmanager
def open_binary_output(location: Location, buffer_size: int = -1) -> Iterator[BinaryIO]:
    """Open a destination for binary writing; stdout is flushed, not closed."""
    if is_stdio(location):
        stream = sys.stdout.buffer
        try:
            yield stream
        finally:
            stream.flush()
        return
    with open(location, "wb", buffering=buffer_size) as handle:
        yield handle
