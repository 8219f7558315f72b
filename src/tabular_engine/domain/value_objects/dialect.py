"""Delimited-record dialect."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tabular_engine.ports.inbound.errors import ConfigurationError


TAB_EXTENSIONS = (".tsv", ".tab")


@dataclass(frozen=True, slots=True)
class Dialect:
    """How records are framed in a source.

    Attributes:
        delimiter: Single field separator byte.
        has_headers: Whether the first record names the fields.
        quote: Quote byte; a quoted field may contain delimiters and newlines.

    Example:
        >>> Dialect.resolve(None, no_headers=True, path="events.tsv").delimiter
        b'\\t'
    """

    delimiter: bytes = b","
    has_headers: bool = True
    quote: bytes = b'"'

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ConfigurationError(
                f"delimiter must be exactly one byte, got {self.delimiter!r}"
            )
        if self.delimiter == self.quote or self.delimiter in b"\r\n":
            raise ConfigurationError(f"delimiter {self.delimiter!r} is not usable")

    @classmethod
    def resolve(
        cls,
        delimiter: str | bytes | None,
        no_headers: bool = False,
        path: str | Path | None = None,
        default: str = ",",
    ) -> Dialect:
        """Build a dialect from CLI-style overrides.

        An explicit delimiter always wins; otherwise ``.tsv``/``.tab`` inputs
        are tab separated and everything else uses ``default``.
        """
        if delimiter is None:
            if path is not None and str(path).lower().endswith(TAB_EXTENSIONS):
                delimiter = "\t"
            else:
                delimiter = default
        if isinstance(delimiter, str):
            if delimiter == r"\t":
                delimiter = "\t"
            try:
                delimiter = delimiter.encode("latin-1")
            except UnicodeEncodeError as exc:
                raise ConfigurationError(
                    f"delimiter must be a single byte, got {delimiter!r}"
                ) from exc
        return cls(delimiter=delimiter, has_headers=not no_headers)
