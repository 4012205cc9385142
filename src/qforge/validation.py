"""Argument checks shared by the relational and graph builders."""

from __future__ import annotations

from typing import Any

from .errors import InvalidArgument
from .types import SortDirection


def non_negative_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgument(
            f"QFORGE_INVALID_{what.upper()}",
            f"{what} must be a non-negative integer, got {value!r}",
            value=value,
        )
    return value


def sort_direction(direction: Any) -> SortDirection:
    parsed = SortDirection.parse(direction)
    if parsed is None:
        raise InvalidArgument(
            "QFORGE_INVALID_SORT_DIRECTION",
            f"Sort direction must be ASC or DESC, got {direction!r}",
            direction=direction,
        )
    return parsed
