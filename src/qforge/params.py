"""
Parameter stores: the only place placeholders are minted.

- PositionalParameters: `$1, $2, ...` in the order values are added. Drivers
  bind these by position, so callers must add values in emission order.
- NamedParameters: `$param1, $props2, ...` with a counter shared across
  prefixes. `scope()` hands out a child that shares the counter but keeps its
  own values, so a fragment can carry exactly the parameters it references.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .errors import InvalidArgument, ParameterCountMismatch
from .types import Dialect

DEFAULT_MARKER = "?"


def split_on_marker(fragment: str, marker: str = DEFAULT_MARKER) -> List[str]:
    """
    Split a raw fragment at each marker that sits outside a single-quoted
    string literal. Returns len(markers) + 1 pieces.
    """
    if not marker:
        raise InvalidArgument("QFORGE_EMPTY_MARKER", "Raw placeholder marker must be a non-empty string")
    pieces: List[str] = []
    buf: List[str] = []
    quoted = False
    i = 0
    n = len(fragment)
    while i < n:
        ch = fragment[i]
        if ch == "'":
            # '' inside a literal toggles twice and stays quoted
            quoted = not quoted
            buf.append(ch)
            i += 1
            continue
        if not quoted and fragment.startswith(marker, i):
            pieces.append("".join(buf))
            buf = []
            i += len(marker)
            continue
        buf.append(ch)
        i += 1
    pieces.append("".join(buf))
    return pieces


class ParameterStore:
    dialect: Dialect

    def add(self, value: Any, prefix: str = "param") -> str:
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError

    def rewrite_markers(self, fragment: str, values: Sequence[Any], marker: str = DEFAULT_MARKER) -> str:
        """Replace each marker in `fragment` with a freshly minted placeholder, binding `values` in order."""
        pieces = split_on_marker(fragment, marker)
        markers = len(pieces) - 1
        if markers != len(values):
            raise ParameterCountMismatch(fragment, markers, len(values))
        out = [pieces[0]]
        for value, piece in zip(values, pieces[1:]):
            out.append(self.add(value))
            out.append(piece)
        return "".join(out)


class PositionalParameters(ParameterStore):
    dialect = Dialect.RELATIONAL

    def __init__(self) -> None:
        self._values: List[Any] = []

    def add(self, value: Any, prefix: str = "param") -> str:
        # prefix is meaningless for positional placeholders
        self._values.append(value)
        return f"${len(self._values)}"

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> List[Any]:
        return list(self._values)


class _Counter:
    def __init__(self) -> None:
        self.value = 0

    def next(self) -> int:
        self.value += 1
        return self.value


class NamedParameters(ParameterStore):
    dialect = Dialect.GRAPH

    def __init__(self, counter: _Counter | None = None) -> None:
        self._counter = counter or _Counter()
        self._values: Dict[str, Any] = {}

    def generate_name(self, prefix: str = "param") -> str:
        return f"{prefix}{self._counter.next()}"

    def add_named(self, value: Any, prefix: str = "param") -> str:
        """Store `value` under a new unique name and return the bare name."""
        name = self.generate_name(prefix)
        self._values[name] = value
        return name

    def add(self, value: Any, prefix: str = "param") -> str:
        return f"${self.add_named(value, prefix)}"

    def scope(self) -> "NamedParameters":
        return NamedParameters(self._counter)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)
