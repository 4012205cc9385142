"""
Condition rendering shared by every statement that has a WHERE (or HAVING).

A condition is either a FieldCondition (field, operator, value) or a
RawCondition (fragment with `?` markers plus the values for them). Rendering
mints placeholders through a ParameterStore, so the caller controls numbering
simply by rendering in emission order.

Filter mappings such as {"age": {"$gte": 18}, "status": "active"} are parsed
into Comparator records first, then into FieldConditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

from .errors import InvalidCondition
from .logging_config import get_logger
from .params import DEFAULT_MARKER, ParameterStore
from .sanitize import sanitize_aggregate, sanitize_qualified
from .types import GRAPH_ONLY, RELATIONAL_ONLY, Dialect, FieldCondition, Operator, RawCondition

logger = get_logger(__name__)

Condition = Union[FieldCondition, RawCondition]


# =============================================================================
# Comparators (filter DSL)
# =============================================================================

@dataclass(frozen=True)
class Comparator:
    value: Any = None
    operator: ClassVar[Operator] = Operator.EQ


@dataclass(frozen=True)
class Eq(Comparator):
    operator: ClassVar[Operator] = Operator.EQ


@dataclass(frozen=True)
class Ne(Comparator):
    operator: ClassVar[Operator] = Operator.NE


@dataclass(frozen=True)
class Lt(Comparator):
    operator: ClassVar[Operator] = Operator.LT


@dataclass(frozen=True)
class Lte(Comparator):
    operator: ClassVar[Operator] = Operator.LTE


@dataclass(frozen=True)
class Gt(Comparator):
    operator: ClassVar[Operator] = Operator.GT


@dataclass(frozen=True)
class Gte(Comparator):
    operator: ClassVar[Operator] = Operator.GTE


@dataclass(frozen=True)
class Like(Comparator):
    operator: ClassVar[Operator] = Operator.LIKE


@dataclass(frozen=True)
class ILike(Comparator):
    operator: ClassVar[Operator] = Operator.ILIKE


@dataclass(frozen=True)
class In(Comparator):
    operator: ClassVar[Operator] = Operator.IN


@dataclass(frozen=True)
class NotIn(Comparator):
    operator: ClassVar[Operator] = Operator.NOT_IN


@dataclass(frozen=True)
class IsNull(Comparator):
    operator: ClassVar[Operator] = Operator.IS


@dataclass(frozen=True)
class IsNotNull(Comparator):
    operator: ClassVar[Operator] = Operator.IS_NOT


@dataclass(frozen=True)
class Contains(Comparator):
    operator: ClassVar[Operator] = Operator.CONTAINS


@dataclass(frozen=True)
class StartsWith(Comparator):
    operator: ClassVar[Operator] = Operator.STARTS_WITH


@dataclass(frozen=True)
class EndsWith(Comparator):
    operator: ClassVar[Operator] = Operator.ENDS_WITH


FILTER_OPERATORS: Dict[str, Type[Comparator]] = {
    "$eq": Eq,
    "$ne": Ne,
    "$lt": Lt,
    "$lte": Lte,
    "$gt": Gt,
    "$gte": Gte,
    "$like": Like,
    "$ilike": ILike,
    "$in": In,
    "$nin": NotIn,
    "$contains": Contains,
    "$startsWith": StartsWith,
    "$endsWith": EndsWith,
}


def _is_list_value(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def to_comparators(spec: Any) -> List[Comparator]:
    """
    Interpret one filter value:
      - Comparator instance: used as-is
      - None: IS NULL
      - {"$op": v, ...}: one comparator per operator key
      - list/tuple/set: IN
      - anything else: equality
    """
    if isinstance(spec, Comparator):
        return [spec]
    if spec is None:
        return [IsNull()]
    if isinstance(spec, Mapping) and spec and all(isinstance(k, str) and k.startswith("$") for k in spec):
        out: List[Comparator] = []
        for key, value in spec.items():
            if key == "$null":
                out.append(IsNull() if value else IsNotNull())
                continue
            cls = FILTER_OPERATORS.get(key)
            if cls is None:
                raise InvalidCondition(f"Unknown filter operator: {key}", operator=key)
            out.append(cls(value))
        return out
    if _is_list_value(spec):
        return [In(list(spec))]
    return [Eq(spec)]


def parse_filters(filters: Mapping[str, Any]) -> List[Tuple[str, Comparator]]:
    """Flatten a filter mapping into (field, comparator) pairs, keeping key order."""
    pairs: List[Tuple[str, Comparator]] = []
    for field, spec in filters.items():
        for comparator in to_comparators(spec):
            pairs.append((field, comparator))
    return pairs


# =============================================================================
# Construction (validated at call time)
# =============================================================================

def make_condition(
    field: str,
    operator: Any,
    value: Any,
    dialect: Dialect,
    *,
    allow_aggregate: bool = False,
) -> FieldCondition:
    if allow_aggregate:
        field = sanitize_aggregate(field, context="condition field")
    else:
        field = sanitize_qualified(field, context="condition field")

    op = Operator.parse(operator)
    if op is None:
        raise InvalidCondition(f"Unsupported operator: {operator!r}", field=field, operator=str(operator))
    if dialect is Dialect.RELATIONAL and op in GRAPH_ONLY:
        raise InvalidCondition(f"Operator {op.value} is not available in SQL", field=field, operator=op.value)
    if dialect is Dialect.GRAPH and op in RELATIONAL_ONLY:
        raise InvalidCondition(f"Operator {op.value} is not available in Cypher", field=field, operator=op.value)

    if value is None:
        if op in (Operator.EQ, Operator.IS):
            return FieldCondition(field, Operator.IS)
        if op in (Operator.NE, Operator.IS_NOT):
            return FieldCondition(field, Operator.IS_NOT)
        raise InvalidCondition(f"Operator {op.value} cannot compare against NULL", field=field, operator=op.value)

    if op in (Operator.IS, Operator.IS_NOT):
        raise InvalidCondition(f"Operator {op.value} only accepts NULL", field=field, operator=op.value)

    if op.is_list:
        if not _is_list_value(value):
            raise InvalidCondition(
                f"Operator {op.value} requires a list of values",
                field=field,
                operator=op.value,
                type=type(value).__name__,
            )
        value = tuple(value)

    return FieldCondition(field, op, value)


def condition_from_comparator(field: str, comparator: Comparator, dialect: Dialect) -> FieldCondition:
    return make_condition(field, comparator.operator, comparator.value, dialect)


def conditions_from_filters(filters: Mapping[str, Any], dialect: Dialect) -> List[FieldCondition]:
    return [condition_from_comparator(f, c, dialect) for f, c in parse_filters(filters)]


def make_raw(fragment: str, values: Optional[Iterable[Any]] = None) -> RawCondition:
    if not isinstance(fragment, str) or not fragment.strip():
        raise InvalidCondition("Raw condition must be a non-empty string")
    return RawCondition(fragment, tuple(values or ()))


# =============================================================================
# Rendering
# =============================================================================

def render_condition(
    condition: Condition,
    store: ParameterStore,
    *,
    marker: str = DEFAULT_MARKER,
) -> Optional[str]:
    """
    Render one condition, minting placeholders in `store`.

    Returns None for conditions that produce no clause (IN / NOT IN with an
    empty list); nothing is added to the store in that case.
    """
    if isinstance(condition, RawCondition):
        return store.rewrite_markers(condition.raw, condition.bound_values, marker)

    field, op = condition.field, condition.operator

    if op is Operator.IS:
        return f"{field} IS NULL"
    if op is Operator.IS_NOT:
        return f"{field} IS NOT NULL"

    if op.is_list:
        values: Sequence[Any] = condition.value
        if not values:
            logger.debug("Skipping empty list condition", field=field, operator=op.value)
            return None
        placeholders = ", ".join(store.add(v) for v in values)
        if store.dialect is Dialect.GRAPH:
            rendered = f"{field} IN [{placeholders}]"
            return f"NOT {rendered}" if op is Operator.NOT_IN else rendered
        return f"{field} {op.value} ({placeholders})"

    return f"{field} {op.value} {store.add(condition.value)}"


def render_conditions(
    conditions: Iterable[Condition],
    store: ParameterStore,
    *,
    marker: str = DEFAULT_MARKER,
) -> Optional[str]:
    """AND-join the rendered conditions; None when nothing renders."""
    parts = []
    for condition in conditions:
        rendered = render_condition(condition, store, marker=marker)
        if rendered is not None:
            parts.append(rendered)
    if not parts:
        return None
    return " AND ".join(parts)
