"""
Identifier gate for names that end up as bare text in a statement.

Values are always bound as parameters. Names (columns, tables, labels,
relationship types, property keys, sort fields) cannot be bound by drivers,
so they must pass through here before being interpolated.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import InvalidIdentifier

_IDENTIFIER = re.compile(r"[A-Za-z0-9_]+")
# COUNT(*), SUM(orders.total), max(price)
_AGGREGATE = re.compile(r"([A-Za-z_][A-Za-z0-9_]*)\((\*|[A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)?)\)")


def is_valid_identifier(name: Any) -> bool:
    return isinstance(name, str) and _IDENTIFIER.fullmatch(name) is not None


def sanitize(name: Any, *, context: str = "identifier") -> str:
    """Return `name` unchanged if it is `[A-Za-z0-9_]+`, else raise InvalidIdentifier."""
    if not is_valid_identifier(name):
        raise InvalidIdentifier(name, context=context)
    return name


def sanitize_qualified(name: Any, *, context: str = "identifier") -> str:
    """
    Accept `column` or `table.column` where every dot-separated part is a
    plain identifier. Empty parts ("a..b", ".a") are rejected.
    """
    if not isinstance(name, str) or not name:
        raise InvalidIdentifier(name, context=context)
    for part in name.split("."):
        if not is_valid_identifier(part):
            raise InvalidIdentifier(name, context=context)
    return name


def sanitize_aggregate(expr: Any, *, context: str = "expression") -> str:
    """Accept a qualified identifier or a single-argument aggregate call such as COUNT(*)."""
    if isinstance(expr, str):
        m = _AGGREGATE.fullmatch(expr)
        if m:
            return expr
    return sanitize_qualified(expr, context=context)
