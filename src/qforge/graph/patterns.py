"""
Node, relationship and path fragments for MATCH / CREATE / MERGE targets.

A property map is bound as one parameter object and each key reads from it,
so a node with several keys names the same parameter once per key:
`(n:Person {name: $props1.name, age: $props1.age})`. Cypher does not accept a
bare map parameter inside MATCH or MERGE patterns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import InvalidArgument
from ..params import NamedParameters
from ..sanitize import sanitize
from ..types import RelDirection


@dataclass(frozen=True)
class Pattern:
    """
    A rendered graph fragment.

    identifiers: the names the caller bound in this fragment (anonymous parts add none)
    params: the parameters referenced by `text`, keyed by placeholder name
    """
    text: str
    identifiers: Tuple[str, ...] = ()
    params: Mapping[str, Any] = field(default_factory=dict)


def _labels(labels: Union[None, str, Iterable[str]]) -> List[str]:
    if labels is None:
        return []
    if isinstance(labels, str):
        return [labels]
    return list(labels)


def _direction(direction: Any) -> RelDirection:
    try:
        return RelDirection(direction)
    except ValueError:
        raise InvalidArgument(
            "QFORGE_INVALID_DIRECTION",
            f"Relationship direction must be '->', '<-' or '-', got {direction!r}",
            direction=direction,
        ) from None


class PatternBuilder:
    """Mints pattern parameters from the owning builder's name counter."""

    def __init__(self, store: NamedParameters) -> None:
        self._store = store

    def _property_map(self, properties: Mapping[str, Any], prefix: str) -> Tuple[str, Dict[str, Any]]:
        # one parameter object; each key reads from it
        keys = [sanitize(k, context="property key") for k in properties]
        scope = self._store.scope()
        name = scope.add_named(dict(properties), prefix)
        body = ", ".join(f"{k}: ${name}.{k}" for k in keys)
        return f" {{{body}}}", scope.values

    def node(
        self,
        identifier: Optional[str] = None,
        labels: Union[None, str, Sequence[str]] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> Pattern:
        text = "("
        if identifier:
            text += sanitize(identifier, context="node identifier")
        for label in _labels(labels):
            text += f":{sanitize(label, context='label')}"

        params: Dict[str, Any] = {}
        if properties:
            props_text, params = self._property_map(properties, "props")
            text += props_text
        text += ")"

        return Pattern(text, (identifier,) if identifier else (), params)

    def relationship(
        self,
        identifier: Optional[str] = None,
        type: Optional[str] = None,
        properties: Optional[Mapping[str, Any]] = None,
        direction: Any = RelDirection.OUT,
    ) -> Pattern:
        arrow = _direction(direction)

        inner = ""
        if identifier:
            inner += sanitize(identifier, context="relationship identifier")
        if type:
            inner += f":{sanitize(type, context='relationship type')}"

        params: Dict[str, Any] = {}
        if properties:
            props_text, params = self._property_map(properties, "relProps")
            inner += props_text

        start = "<-" if arrow is RelDirection.IN else "-"
        end = "->" if arrow is RelDirection.OUT else "-"
        return Pattern(f"{start}[{inner}]{end}", (identifier,) if identifier else (), params)

    def path(self, patterns: Iterable[Pattern]) -> Pattern:
        text = ""
        identifiers: List[str] = []
        params: Dict[str, Any] = {}
        for p in patterns:
            text += p.text
            for ident in p.identifiers:
                if ident not in identifiers:
                    identifiers.append(ident)
            params.update(p.params)
        return Pattern(text, tuple(identifiers), params)
