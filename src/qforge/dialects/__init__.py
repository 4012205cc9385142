"""Dialects that render declarative query documents; importing registers them."""

from . import cypher, postgres  # noqa: F401
from .base import QueryDialect, RenderResult
from .registry import available, get, register

__all__ = ["QueryDialect", "RenderResult", "available", "get", "register"]
