"""Cypher dialect: pattern fragments, the clause builder and one-call helpers."""

from .builder import CypherBuilder, cypher
from .patterns import Pattern, PatternBuilder
from .shortcuts import create_node, create_relationship, delete_node, find_node, update_node

__all__ = [
    "CypherBuilder",
    "cypher",
    "Pattern",
    "PatternBuilder",
    "create_node",
    "create_relationship",
    "delete_node",
    "find_node",
    "update_node",
]
