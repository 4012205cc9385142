"""
Fluent Cypher builder.

Clauses are collected into buckets and emitted in fixed order regardless of
call order:

    MATCH* -> OPTIONAL MATCH* -> UNWIND* -> WHERE -> WITH -> CREATE* -> MERGE*
    -> SET -> DETACH DELETE / DELETE -> RETURN -> ORDER BY -> SKIP -> LIMIT

Placeholders are named (`$param1`, `$props2`, ...). Every fragment carries the
parameters it references, and build() only collects parameters from
fragments that were placed into a clause, so a pattern created but never used
leaves no stray entry in the parameter map.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..conditions import conditions_from_filters, make_condition, render_condition
from ..config import BuilderConfig, get_default_config
from ..errors import InvalidArgument, InvalidCondition
from ..logging_config import get_logger
from ..params import NamedParameters
from ..sanitize import sanitize, sanitize_qualified
from ..types import CypherQuery, Dialect, Operator, RelDirection
from ..validation import non_negative_int, sort_direction
from .patterns import Pattern, PatternBuilder

logger = get_logger(__name__)

PatternLike = Union[Pattern, str]


def _as_pattern(pattern: PatternLike) -> Pattern:
    if isinstance(pattern, Pattern) and pattern.text.strip():
        return pattern
    if isinstance(pattern, str) and pattern.strip():
        return Pattern(pattern)
    raise InvalidArgument("QFORGE_INVALID_PATTERN", f"Expected a Pattern or a non-empty string, got {pattern!r}")


def _property_ref(identifier: str, prop: str) -> str:
    return f"{sanitize(identifier, context='identifier')}.{sanitize(prop, context='property')}"


class CypherBuilder:
    def __init__(self, *, config: Optional[BuilderConfig] = None) -> None:
        self.config = config or get_default_config()
        self._store = NamedParameters()
        self._patterns = PatternBuilder(self._store)

        self._match: List[Pattern] = []
        self._optional_match: List[Pattern] = []
        self._unwind: List[Pattern] = []
        self._where: List[Pattern] = []
        self._with: List[str] = []
        self._create: List[Pattern] = []
        self._merge: List[Pattern] = []
        self._set: List[Pattern] = []
        self._detach_delete: List[str] = []
        self._delete: List[str] = []
        self._return: List[str] = []
        self._order_by: List[str] = []
        self._skip: Optional[Pattern] = None
        self._limit: Optional[Pattern] = None

    # ------------------------------------------------------------------
    # parameters
    # ------------------------------------------------------------------

    def _bind(self, text_before: str, value: Any, text_after: str = "", prefix: str = "param") -> Pattern:
        scope = self._store.scope()
        placeholder = scope.add(value, prefix)
        return Pattern(f"{text_before}{placeholder}{text_after}", (), scope.values)

    def _raw(self, fragment: str, values: Optional[Iterable[Any]]) -> Pattern:
        if not isinstance(fragment, str) or not fragment.strip():
            raise InvalidCondition("Raw fragment must be a non-empty string")
        scope = self._store.scope()
        text = scope.rewrite_markers(fragment, tuple(values or ()), self.config.raw_marker)
        return Pattern(text, (), scope.values)

    # ------------------------------------------------------------------
    # patterns
    # ------------------------------------------------------------------

    def node(
        self,
        identifier: Optional[str] = None,
        labels: Union[None, str, Sequence[str]] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> Pattern:
        return self._patterns.node(identifier, labels, properties)

    def relationship(
        self,
        identifier: Optional[str] = None,
        type: Optional[str] = None,
        properties: Optional[Mapping[str, Any]] = None,
        direction: Any = RelDirection.OUT,
    ) -> Pattern:
        return self._patterns.relationship(identifier, type, properties, direction)

    def path(self, patterns: Iterable[Pattern]) -> Pattern:
        return self._patterns.path(patterns)

    # ------------------------------------------------------------------
    # reading clauses
    # ------------------------------------------------------------------

    def match(self, pattern: PatternLike) -> CypherBuilder:
        self._match.append(_as_pattern(pattern))
        return self

    def optional_match(self, pattern: PatternLike) -> CypherBuilder:
        self._optional_match.append(_as_pattern(pattern))
        return self

    def unwind(self, items: Any, identifier: str) -> CypherBuilder:
        """
        UNWIND a bound list, or an expression when `items` is a string
        (e.g. "$rows" supplied separately, or "n.tags").
        """
        alias = sanitize(identifier, context="unwind identifier")
        if isinstance(items, str):
            self._unwind.append(Pattern(f"UNWIND {items} AS {alias}"))
        else:
            self._unwind.append(self._bind("UNWIND ", list(items), f" AS {alias}"))
        return self

    def where(self, condition: str, values: Optional[Iterable[Any]] = None) -> CypherBuilder:
        """Raw condition; each marker (default `?`) is bound to the next value."""
        self._where.append(self._raw(condition, values))
        return self

    def where_compare(self, identifier: str, prop: str, operator: Any, value: Any) -> CypherBuilder:
        cond = make_condition(_property_ref(identifier, prop), operator, value, Dialect.GRAPH)
        scope = self._store.scope()
        rendered = render_condition(cond, scope, marker=self.config.raw_marker)
        if rendered is not None:
            self._where.append(Pattern(rendered, (), scope.values))
        return self

    def where_equals(self, identifier: str, prop: str, value: Any) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.EQ, value)

    def where_in(self, identifier: str, prop: str, values: Iterable[Any]) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.IN, list(values))

    def where_not_in(self, identifier: str, prop: str, values: Iterable[Any]) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.NOT_IN, list(values))

    def where_null(self, identifier: str, prop: str) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.IS, None)

    def where_not_null(self, identifier: str, prop: str) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.IS_NOT, None)

    def where_contains(self, identifier: str, prop: str, value: str) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.CONTAINS, value)

    def where_starts_with(self, identifier: str, prop: str, value: str) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.STARTS_WITH, value)

    def where_ends_with(self, identifier: str, prop: str, value: str) -> CypherBuilder:
        return self.where_compare(identifier, prop, Operator.ENDS_WITH, value)

    def where_filters(self, identifier: str, filters: Mapping[str, Any]) -> CypherBuilder:
        """Filter mapping keyed by property name, e.g. where_filters("n", {"age": {"$gt": 30}})."""
        alias = sanitize(identifier, context="identifier")
        prefixed = {f"{alias}.{sanitize(k, context='property')}": v for k, v in filters.items()}
        for cond in conditions_from_filters(prefixed, Dialect.GRAPH):
            scope = self._store.scope()
            rendered = render_condition(cond, scope, marker=self.config.raw_marker)
            if rendered is not None:
                self._where.append(Pattern(rendered, (), scope.values))
        return self

    def with_(self, *items: str) -> CypherBuilder:
        self._with.extend(items)
        return self

    # ------------------------------------------------------------------
    # writing clauses
    # ------------------------------------------------------------------

    def create(self, pattern: PatternLike) -> CypherBuilder:
        self._create.append(_as_pattern(pattern))
        return self

    def merge(self, pattern: PatternLike) -> CypherBuilder:
        self._merge.append(_as_pattern(pattern))
        return self

    def set(self, item: str, values: Optional[Iterable[Any]] = None) -> CypherBuilder:
        self._set.append(self._raw(item, values))
        return self

    def set_property(self, identifier: str, prop: str, value: Any) -> CypherBuilder:
        self._set.append(self._bind(f"{_property_ref(identifier, prop)} = ", value))
        return self

    def set_properties(self, identifier: str, properties: Mapping[str, Any]) -> CypherBuilder:
        for key in properties:
            sanitize(key, context="property key")
        alias = sanitize(identifier, context="identifier")
        self._set.append(self._bind(f"{alias} += ", dict(properties)))
        return self

    def delete(self, *items: str) -> CypherBuilder:
        self._delete.extend(sanitize(i, context="delete target") for i in items)
        return self

    def detach_delete(self, *items: str) -> CypherBuilder:
        self._detach_delete.extend(sanitize(i, context="delete target") for i in items)
        return self

    # ------------------------------------------------------------------
    # projection
    # ------------------------------------------------------------------

    def return_(self, *items: str) -> CypherBuilder:
        self._return.extend(items)
        return self

    def order_by(self, item: str, direction: Any = "ASC") -> CypherBuilder:
        d = sort_direction(direction)
        self._order_by.append(f"{sanitize_qualified(item, context='sort field')} {d.value}")
        return self

    def skip(self, count: int) -> CypherBuilder:
        self._skip = self._bind("SKIP ", non_negative_int(count, "skip"), prefix="skip")
        return self

    def limit(self, count: int) -> CypherBuilder:
        self._limit = self._bind("LIMIT ", non_negative_int(count, "limit"), prefix="limit")
        return self

    # ------------------------------------------------------------------
    # assembly
    # ------------------------------------------------------------------

    def build(self) -> CypherQuery:
        parts: List[str] = []
        params: Dict[str, Any] = {}

        def emit(text: str, fragments: Iterable[Pattern] = ()) -> None:
            parts.append(text)
            for f in fragments:
                params.update(f.params)

        for p in self._match:
            emit(f"MATCH {p.text}", [p])
        for p in self._optional_match:
            emit(f"OPTIONAL MATCH {p.text}", [p])
        for p in self._unwind:
            emit(p.text, [p])
        if self._where:
            emit("WHERE " + " AND ".join(p.text for p in self._where), self._where)
        if self._with:
            emit(f"WITH {', '.join(self._with)}")
        for p in self._create:
            emit(f"CREATE {p.text}", [p])
        for p in self._merge:
            emit(f"MERGE {p.text}", [p])
        if self._set:
            emit("SET " + ", ".join(p.text for p in self._set), self._set)
        if self._detach_delete:
            emit(f"DETACH DELETE {', '.join(self._detach_delete)}")
        if self._delete:
            emit(f"DELETE {', '.join(self._delete)}")
        if self._return:
            emit(f"RETURN {', '.join(self._return)}")
        if self._order_by:
            emit(f"ORDER BY {', '.join(self._order_by)}")
        if self._skip is not None:
            emit(self._skip.text, [self._skip])
        if self._limit is not None:
            emit(self._limit.text, [self._limit])

        logger.debug("Built Cypher statement", clauses=len(parts), params=len(params))
        return CypherQuery(query=self.config.graph_clause_separator.join(parts), params=params)


def cypher(*, config: Optional[BuilderConfig] = None) -> CypherBuilder:
    return CypherBuilder(config=config)
