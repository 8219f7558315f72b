"""Memory policy gate.

Decides, at a single point in time, whether an input may be materialized
in memory. The decision is a value, never a side effect: callers that get
an Abort either switch to a streaming strategy or raise ``to_error()``.

    available = (available_memory + free_swap) * (100 - headroom_pct) / 100
    required  = file_size * safety_factor

The gate only runs when the caller forces it (or ``always_check`` is set);
otherwise it proceeds unconditionally. A headroom of 0 disables it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

import psutil

from tabular_engine.infrastructure.logging import get_logger
from tabular_engine.ports.inbound.errors import InsufficientMemoryError

logger = get_logger(__name__)

MIN_HEADROOM_PCT = 10
MAX_HEADROOM_PCT = 90

# parsed records (tuples of bytes) plus the sorted copy take about 16x the
# file size for short fields
DEFAULT_SAFETY_FACTOR = 20.0


@dataclass(frozen=True)
class MemorySnapshot:
    """System memory figures in bytes."""

    available: int
    free_swap: int
    total: int


@dataclass(frozen=True)
class Proceed:
    """The input may be loaded in memory."""

    required_bytes: int = 0
    available_bytes: int = 0
    checked: bool = False


@dataclass(frozen=True)
class Abort:
    """The input is judged too large to load in memory."""

    reason: str
    required_bytes: int
    available_bytes: int

    def to_error(self) -> InsufficientMemoryError:
        return InsufficientMemoryError(self.reason, self.required_bytes, self.available_bytes)


MemoryDecision = Union[Proceed, Abort]


def psutil_snapshot() -> MemorySnapshot:
    """Read current memory figures from the operating system."""
    vm = psutil.virtual_memory()
    swap = psutil.swap_memory()
    return MemorySnapshot(available=vm.available, free_swap=swap.free, total=vm.total)


class MemoryPolicyGate:
    """Point-in-time estimate of whether an input fits in memory."""

    def __init__(
        self,
        safety_factor: float = DEFAULT_SAFETY_FACTOR,
        headroom_pct: int = 20,
        always_check: bool = False,
        probe: Callable[[], MemorySnapshot] = psutil_snapshot,
    ) -> None:
        """Initialize the gate.

        Args:
            safety_factor: Multiplier turning file size into required memory.
            headroom_pct: Percent of memory to leave free; 0 disables the gate.
            always_check: Check even when callers do not force it.
            probe: Source of memory figures (psutil by default).
        """
        self._safety_factor = safety_factor
        self._headroom_pct = headroom_pct
        self._always_check = always_check
        self._probe = probe

    def decide(self, file_size: int, force_check: bool = False) -> MemoryDecision:
        """Decide whether ``file_size`` bytes may be materialized."""
        if not (force_check or self._always_check) or self._headroom_pct == 0:
            return Proceed()

        headroom = min(max(self._headroom_pct, MIN_HEADROOM_PCT), MAX_HEADROOM_PCT)
        snapshot = self._probe()
        available = int((snapshot.available + snapshot.free_swap) * (100 - headroom) / 100)
        required = int(file_size * self._safety_factor)

        if required > available:
            reason = (
                f"Not enough memory to process the file in memory. "
                f"File size: {file_size}. Required (x{self._safety_factor}): {required}. "
                f"Max available: {available} (available memory {snapshot.available}, "
                f"free swap {snapshot.free_swap}, headroom {headroom}%). "
                f"Use a streaming mode or raise the memory limit."
            )
            logger.info(
                "memory_gate_abort",
                file_size=file_size,
                required_bytes=required,
                available_bytes=available,
            )
            return Abort(reason=reason, required_bytes=required, available_bytes=available)

        return Proceed(required_bytes=required, available_bytes=available, checked=True)

    def decide_for_path(self, path: str | Path, force_check: bool = False) -> MemoryDecision:
        """Decide for a file on disk, using its current size."""
        return self.decide(os.stat(path).st_size, force_check)
