"""Field selection: which fields of a record take part in an operation.

A selection expression is resolved exactly once, against the header record
(or the first record of a headerless source), before any output is written.

Expression grammar:
    - items are separated by commas
    - ``3``: the third field (indices are 1-based)
    - ``name``: the field whose header is ``name``
    - ``"a, b"``: a quoted header name, taken literally
    - ``2-4`` / ``first-last``: inclusive range; reversed ranges run backwards
    - ``-3`` / ``2-``: open-ended range from the first / to the last field
    - ``_``: the last field
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from tabular_engine.ports.inbound.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class Selection:
    """Resolved, ordered field positions (0-based).

    Example:
        >>> sel = Selection.resolve("b,1", [b"a", b"b"], has_headers=True)
        >>> sel.indices
        (1, 0)
        >>> sel.select((b"x", b"y"))
        (b'y', b'x')
    """

    indices: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.indices:
            raise ConfigurationError("selection must name at least one field")
        if any(i < 0 for i in self.indices):
            raise ConfigurationError(f"selection indices must be non-negative: {self.indices}")

    def __len__(self) -> int:
        return len(self.indices)

    def select(self, record: Sequence[bytes]) -> tuple[bytes | None, ...]:
        """Project a record onto the selection; absent fields are None."""
        width = len(record)
        return tuple(record[i] if i < width else None for i in self.indices)

    @classmethod
    def all(cls, width: int) -> Selection:
        """Select every field of a record of the given width."""
        return cls(tuple(range(width)))

    @classmethod
    def resolve(
        cls,
        expression: str | None,
        headers: Sequence[bytes],
        has_headers: bool = True,
    ) -> Selection:
        """Resolve an expression against the observed header record.

        Args:
            expression: Selection expression, or None for every field.
            headers: Header record, or the first record when headerless.
            has_headers: Whether field names may be used.

        Returns:
            The resolved selection.

        Raises:
            ConfigurationError: On unknown names, out-of-range indices, or an
                expression that selects nothing.
        """
        width = len(headers)
        if expression is None or not expression.strip():
            return cls.all(width)

        resolver = _Resolver(headers, has_headers)
        indices: list[int] = []
        for item in _split_items(expression):
            indices.extend(resolver.item(item))
        return cls(tuple(indices))


class _Resolver:
    """Resolves single selection items to 0-based positions."""

    def __init__(self, headers: Sequence[bytes], has_headers: bool) -> None:
        self._headers = list(headers)
        self._has_headers = has_headers

    @property
    def _width(self) -> int:
        return len(self._headers)

    def item(self, item: str) -> list[int]:
        if _is_quoted(item):
            return [self._by_name(item[1:-1])]
        if self._has_headers and item.encode("utf-8") in self._headers:
            return [self._by_name(item)]
        if "-" in item:
            low, _, high = item.partition("-")
            first = self._single(low) if low else 0
            last = self._single(high) if high else self._width - 1
            step = 1 if first <= last else -1
            return list(range(first, last + step, step))
        return [self._single(item)]

    def _single(self, token: str) -> int:
        if token == "_":
            if self._width == 0:
                raise ConfigurationError("cannot select the last field of an empty record")
            return self._width - 1
        if token.isdigit():
            position = int(token)
            if position < 1 or position > self._width:
                raise ConfigurationError(
                    f"selector index {position} is out of bounds: "
                    f"must be between 1 and {self._width}"
                )
            return position - 1
        if _is_quoted(token):
            token = token[1:-1]
        return self._by_name(token)

    def _by_name(self, name: str) -> int:
        if not self._has_headers:
            raise ConfigurationError(
                f"cannot select field {name!r} by name when the input has no headers"
            )
        encoded = name.encode("utf-8")
        try:
            return self._headers.index(encoded)
        except ValueError:
            raise ConfigurationError(f"selector name {name!r} does not exist") from None


def _is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] == '"' and token[-1] == '"'


def _split_items(expression: str) -> list[str]:
    """Split on commas outside double quotes."""
    items: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in expression:
        if char == '"':
            in_quotes = not in_quotes
        if char == "," and not in_quotes:
            items.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    if in_quotes:
        raise ConfigurationError(f"unbalanced quotes in selection {expression!r}")
    items.append("".join(current).strip())
    if any(not item for item in items):
        raise ConfigurationError(f"empty item in selection {expression!r}")
    return items
