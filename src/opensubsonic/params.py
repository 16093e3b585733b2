"""Query parameter encoding for Subsonic API requests.

Parameters are kept as an ordered list of ``(name, value)`` pairs so that
array-valued parameters (``musicFolderId``, ``songId``, ``id`` ...) can be
repeated. Absent optional values are dropped here and nowhere else:

    >>> params = ParameterSet().add("type", "newest").add("genre", None)
    >>> params.add("musicFolderId", [1, 3, 7]).encode()
    'type=newest&musicFolderId=1&musicFolderId=3&musicFolderId=7'
"""

from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import httpx

from .exceptions import InvalidArgumentError

Scalar = Union[str, int, float, bool, Enum]
ParamValue = Union[Scalar, None, Sequence[Scalar]]
Pair = Tuple[str, str]


def format_value(value: Scalar) -> str:
    """Render a scalar in the textual form the Subsonic protocol expects.

    Booleans become ``true``/``false``, numbers their decimal form and enums
    their value.

    Raises:
        InvalidArgumentError: For unsupported value types
    """
    if isinstance(value, Enum):
        return format_value(value.value)
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    raise InvalidArgumentError(f"Unsupported parameter value type: {type(value).__name__}")


class ParameterSet:
    """Ordered, possibly repeated query parameters for one request."""

    def __init__(self, pairs: Optional[Iterable[Tuple[str, ParamValue]]] = None):
        self._pairs: List[Pair] = []
        if pairs is not None:
            for name, value in pairs:
                self.add(name, value)

    def add(self, name: str, value: ParamValue) -> "ParameterSet":
        """Append a parameter and return self.

        ``None`` and empty lists are skipped entirely; a list or tuple adds one
        pair per element in the given order.
        """
        if value is None:
            return self
        if isinstance(value, (list, tuple)):
            for item in value:
                if item is not None:
                    self._pairs.append((name, format_value(item)))
            return self
        self._pairs.append((name, format_value(value)))
        return self

    def extend(self, other: Iterable[Tuple[str, ParamValue]]) -> "ParameterSet":
        for name, value in other:
            self.add(name, value)
        return self

    def items(self) -> List[Pair]:
        """Return a copy of the encoded ``(name, value)`` pairs."""
        return list(self._pairs)

    def get_all(self, name: str) -> List[str]:
        return [value for key, value in self._pairs if key == name]

    def encode(self) -> str:
        return encode_query(self._pairs)

    def __iter__(self) -> Iterator[Pair]:
        return iter(list(self._pairs))

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, name: Any) -> bool:
        return any(key == name for key, _ in self._pairs)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"ParameterSet({self._pairs!r})"


def encode_query(pairs: Iterable[Pair]) -> str:
    """Percent-encode already formatted pairs into a query string."""
    return str(httpx.QueryParams(list(pairs)))


def decode_query(query: str) -> List[Pair]:
    """Split a query string back into ``(name, value)`` pairs, order preserved."""
    return list(httpx.QueryParams(query).multi_items())
