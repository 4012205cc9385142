"""
Render graph query documents through CypherBuilder.

A path is either a literal string or a list of elements:

    match:
      - [{node: {id: a, labels: [Person], properties: {name: Ann}}},
         {rel: {id: r, type: KNOWS, direction: "->"}},
         {node: {id: b, labels: [Person]}}]
    where: {"b.age": {$gte: 30}}
    return: [b]
    order_by: [{field: b.name, direction: asc}]
    skip: 0
    limit: 25
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..config import BuilderConfig
from ..errors import InvalidArgument
from ..graph.builder import CypherBuilder
from ..graph.patterns import Pattern
from .base import RenderResult, require
from .registry import register


def _bad_pattern(spec: Any) -> InvalidArgument:
    return InvalidArgument(
        "QFORGE_DOCUMENT_BAD_PATTERN",
        f"Expected a pattern string, a {{node|rel}} mapping or a list of them, got {spec!r}",
        pattern=repr(spec),
    )


def _element(builder: CypherBuilder, element: Any) -> Pattern:
    if not isinstance(element, dict):
        raise _bad_pattern(element)
    if "node" in element:
        n = element["node"] or {}
        if not isinstance(n, dict):
            raise _bad_pattern(element)
        return builder.node(n.get("id"), n.get("labels"), n.get("properties"))
    if "rel" in element:
        r = element["rel"] or {}
        if not isinstance(r, dict):
            raise _bad_pattern(element)
        return builder.relationship(r.get("id"), r.get("type"), r.get("properties"), r.get("direction", "->"))
    raise InvalidArgument(
        "QFORGE_DOCUMENT_BAD_PATTERN",
        f"Pattern elements must have a 'node' or 'rel' key, got {sorted(element)}",
        keys=sorted(element),
    )


def _pattern(builder: CypherBuilder, spec: Any):
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        return _element(builder, spec)
    if not isinstance(spec, list):
        raise _bad_pattern(spec)
    return builder.path([_element(builder, e) for e in spec])


def _split_ref(ref: Any) -> List[str]:
    parts = str(ref).split(".", 1)
    if len(parts) != 2:
        raise InvalidArgument(
            "QFORGE_DOCUMENT_BAD_REFERENCE",
            f"Expected 'identifier.property', got {ref!r}",
            reference=ref,
        )
    return parts


class CypherDialect:
    name = "cypher"
    paramstyle = "named_dollar"  # $param1, $props2, ...

    def render(self, document: Dict[str, Any], *, config: Optional[BuilderConfig] = None) -> RenderResult:
        b = CypherBuilder(config=config)

        for spec in document.get("match") or []:
            b.match(_pattern(b, spec))
        for spec in document.get("optional_match") or []:
            b.optional_match(_pattern(b, spec))
        unwind = document.get("unwind")
        if unwind:
            b.unwind(require(unwind, "items", "unwind"), require(unwind, "as", "unwind"))
        for ref, spec in (document.get("where") or {}).items():
            ident, prop = _split_ref(ref)
            b.where_filters(ident, {prop: spec})
        if document.get("with"):
            b.with_(*document["with"])
        for spec in document.get("create") or []:
            b.create(_pattern(b, spec))
        for spec in document.get("merge") or []:
            b.merge(_pattern(b, spec))
        for ref, value in (document.get("set") or {}).items():
            if "." in ref:
                ident, prop = _split_ref(ref)
                b.set_property(ident, prop, value)
            else:
                b.set_properties(ref, value)
        if document.get("detach_delete"):
            b.detach_delete(*document["detach_delete"])
        if document.get("delete"):
            b.delete(*document["delete"])
        if document.get("return"):
            b.return_(*document["return"])
        for item in document.get("order_by") or []:
            if isinstance(item, str):
                b.order_by(item)
            else:
                b.order_by(require(item, "field", "order_by entry"), item.get("direction", "ASC"))
        if document.get("skip") is not None:
            b.skip(document["skip"])
        if document.get("limit") is not None:
            b.limit(document["limit"])

        meta = {"dialect": self.name, "paramstyle": self.paramstyle}
        return RenderResult(query=b.build(), metadata=meta)


register(CypherDialect())
