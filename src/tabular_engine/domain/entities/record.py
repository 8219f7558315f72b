"""Byte records.

A record is an immutable tuple of byte fields. Field bytes are never
decoded for storage or output; only the case-folded comparator decodes,
and only for the duration of a comparison.
"""

from __future__ import annotations

from typing import NewType

ByteRecord = tuple[bytes, ...]
"""One delimited record as an ordered tuple of raw byte fields."""

RecordPosition = NewType("RecordPosition", int)
"""0-based position of a data record, header excluded."""

EMPTY_RECORD: ByteRecord = ()
