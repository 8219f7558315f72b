"""Error taxonomy for tabular engine operators.

Every failure an operator reports derives from TabularEngineError so that
callers can catch the whole family, or a single category:

    - ConfigurationError: bad parameters, detected before any output.
    - OrderViolationError: input not in the order a sorted-mode operator needs.
    - InsufficientMemoryError, IndexOutOfRangeError: resource errors the
      caller can recover from by choosing another strategy.
    - IndexUnavailableError: the side-car index is missing or unreadable.
    - CorruptStreamError: a compressed container failed to decode.

Operating-system I/O failures are not wrapped; OSError propagates as is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from tabular_engine.domain.value_objects import ComparisonMode


class TabularEngineError(Exception):
    """Base class for all tabular engine errors."""

    pass


class ConfigurationError(TabularEngineError):
    """Invalid or conflicting operator parameters."""

    pass


class OrderViolationError(TabularEngineError):
    """A sorted-mode operator found a record greater than its successor.

    Attributes:
        current: The earlier record (as a tuple of byte fields).
        next: The later record that sorts before it.
        mode: The comparison mode in effect.
        selection: The 0-based field positions compared.
    """

    def __init__(
        self,
        current: Sequence[bytes],
        next: Sequence[bytes],
        mode: ComparisonMode,
        selection: Sequence[int],
    ) -> None:
        self.current = tuple(current)
        self.next = tuple(next)
        self.mode = mode
        self.selection = tuple(selection)
        super().__init__(
            "Aborting! Input not sorted! Current record is greater than Next record.\n"
            f"  Compare mode: {mode.name}; Select columns index/es (0-based): {list(self.selection)}\n"
            f"  Current: {self.current!r}\n"
            f"     Next: {self.next!r}"
        )


class InsufficientMemoryError(TabularEngineError):
    """The memory policy gate judged the input too large to load."""

    def __init__(self, reason: str, required_bytes: int, available_bytes: int) -> None:
        self.required_bytes = required_bytes
        self.available_bytes = available_bytes
        super().__init__(reason)


class IndexOutOfRangeError(TabularEngineError):
    """Seek past the last record of an indexed source."""

    def __init__(self, position: int, record_count: int) -> None:
        self.position = position
        self.record_count = record_count
        super().__init__(
            f"invalid record index {position} (there are {record_count} records)"
        )


class IndexUnavailableError(TabularEngineError):
    """The side-car index is missing, truncated, or not an index file."""

    pass


class CorruptStreamError(TabularEngineError):
    """A compressed block stream could not be decoded.

    Attributes:
        bytes_decompressed: Bytes successfully produced before the failure.
    """

    def __init__(self, message: str, bytes_decompressed: int) -> None:
        self.bytes_decompressed = bytes_decompressed
        super().__init__(f"{message} (after {bytes_decompressed} decompressed bytes)")
