"""One-call helpers for the common single-node and single-relationship statements."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..config import BuilderConfig
from ..types import CypherQuery
from .builder import CypherBuilder


def find_node(label: str, properties: Optional[Mapping[str, Any]] = None, *,
              config: Optional[BuilderConfig] = None) -> CypherQuery:
    builder = CypherBuilder(config=config)
    node = builder.node("n", [label], properties)
    return builder.match(node).return_("n").build()


def create_node(label: str, properties: Mapping[str, Any], *,
                config: Optional[BuilderConfig] = None) -> CypherQuery:
    builder = CypherBuilder(config=config)
    node = builder.node("n", [label], properties)
    return builder.create(node).return_("n").build()


def update_node(label: str, id_property: str, id_value: Any, properties: Mapping[str, Any], *,
                config: Optional[BuilderConfig] = None) -> CypherQuery:
    builder = CypherBuilder(config=config)
    builder.match(builder.node("n", [label], {id_property: id_value}))
    if properties:
        builder.set_properties("n", properties)
    return builder.return_("n").build()


def delete_node(label: str, id_property: str, id_value: Any, detach: bool = False, *,
                config: Optional[BuilderConfig] = None) -> CypherQuery:
    builder = CypherBuilder(config=config)
    builder.match(builder.node("n", [label], {id_property: id_value}))
    if detach:
        builder.detach_delete("n")
    else:
        builder.delete("n")
    return builder.build()


def create_relationship(
    start_label: str,
    start_id_property: str,
    start_id: Any,
    end_label: str,
    end_id_property: str,
    end_id: Any,
    rel_type: str,
    rel_properties: Optional[Mapping[str, Any]] = None,
    *,
    config: Optional[BuilderConfig] = None,
) -> CypherQuery:
    """
    MATCH both endpoints by id, then CREATE the relationship between the
    bound identifiers. The CREATE path reuses the identifiers only, so the
    endpoint lookups are not repeated.
    """
    builder = CypherBuilder(config=config)
    builder.match(builder.node("start", [start_label], {start_id_property: start_id}))
    builder.match(builder.node("end", [end_label], {end_id_property: end_id}))

    rel_path = builder.path([
        builder.node("start"),
        builder.relationship("r", rel_type, rel_properties),
        builder.node("end"),
    ])
    return builder.create(rel_path).return_("r").build()
