"""Outbound ports - interfaces for record storage.

Outbound ports define contracts for the files and streams the engine
reads records from and writes records to.
"""

from tabular_engine.ports.outbound.record_io import IndexedSource, RecordSink, RecordSource

__all__ = [
    "RecordSource",
    "RecordSink",
    "IndexedSource",
]
