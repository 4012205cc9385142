from __future__ import annotations

from typing import Dict

from ..errors import UnknownDialect
from .base import QueryDialect

_REGISTRY: Dict[str, QueryDialect] = {}


def register(dialect: QueryDialect) -> None:
    name = getattr(dialect, "name", None)
    if not name or not isinstance(name, str):
        raise ValueError("Dialect must define a non-empty .name")
    _REGISTRY[name.lower()] = dialect


def get(name: str) -> QueryDialect:
    k = (name or "").lower()
    if k not in _REGISTRY:
        raise UnknownDialect(name, sorted(_REGISTRY.keys()))
    return _REGISTRY[k]


def available() -> Dict[str, QueryDialect]:
    return dict(_REGISTRY)
