"""Inbound ports - the failure contract offered to engine callers."""

from tabular_engine.ports.inbound.errors import (
    ConfigurationError,
    CorruptStreamError,
    IndexOutOfRangeError,
    IndexUnavailableError,
    InsufficientMemoryError,
    OrderViolationError,
    TabularEngineError,
)

__all__ = [
    "TabularEngineError",
    "ConfigurationError",
    "OrderViolationError",
    "InsufficientMemoryError",
    "IndexOutOfRangeError",
    "IndexUnavailableError",
    "CorruptStreamError",
]
