"""Application layer for the tabular engine.

The application layer wires domain operators to files and streams.

Exports:
    TabularEngine:
        - TabularEngine: Entry point for every operator
    Options:
        - SourceOptions, DedupOptions, SortCheckOptions, TransposeOptions,
          SliceOptions, CodecOptions: Operator parameters
"""

from tabular_engine.application.engine import TabularEngine
from tabular_engine.application.options import (
    CodecOptions,
    DedupOptions,
    SliceOptions,
    SortCheckOptions,
    SourceOptions,
    TransposeOptions,
)

__all__ = [
    "TabularEngine",
    "SourceOptions",
    "DedupOptions",
    "SortCheckOptions",
    "TransposeOptions",
    "SliceOptions",
    "CodecOptions",
]
