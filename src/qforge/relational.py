"""
Fluent builders for parameterized PostgreSQL statements.

Each builder collects clause buckets in any call order and assembles them in
fixed grammar order on build(). Placeholders are numbered `$1..$N` in the
order they appear in the text (SET, WHERE, HAVING, LIMIT, OFFSET), which is
the order drivers bind positional parameters.

Usage:
    q = (
        select("users", ["id", "name"])
        .where_equals("status", "active")
        .where_in("role", ["admin", "owner"])
        .order_by("created_at", "desc")
        .paginate(page=2, page_size=20)
        .build()
    )
    # q.text   -> "SELECT id, name FROM users WHERE status = $1 AND role IN ($2, $3)
    #              ORDER BY created_at DESC LIMIT $4 OFFSET $5"
    # q.params -> ["active", "admin", "owner", 20, 20]
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .conditions import Condition, conditions_from_filters, make_condition, make_raw, render_conditions
from .config import BuilderConfig, get_default_config
from .errors import EmptyMandatoryInput, InvalidArgument
from .logging_config import get_logger
from .params import PositionalParameters
from .sanitize import sanitize, sanitize_qualified
from .types import Dialect, FieldCondition, Join, JoinType, Operator, Pagination, Sort, SqlQuery
from .validation import non_negative_int, sort_direction

logger = get_logger(__name__)

FieldList = Union[str, Sequence[str]]


def _as_list(fields: FieldList) -> List[str]:
    if isinstance(fields, str):
        return [fields]
    return list(fields)


def _returning_item(field: str) -> str:
    if field == "*":
        return field
    return sanitize_qualified(field, context="returning field")


class _WhereMixin:
    """WHERE bucket and its chainable methods, shared by SELECT, UPDATE and DELETE."""

    _conditions: List[Condition]

    def where(self, field: str, operator: Any, value: Any):
        self._conditions.append(make_condition(field, operator, value, Dialect.RELATIONAL))
        return self

    def where_equals(self, field: str, value: Any):
        return self.where(field, Operator.EQ, value)

    def where_not_equals(self, field: str, value: Any):
        return self.where(field, Operator.NE, value)

    def where_in(self, field: str, values: Iterable[Any]):
        # empty lists render nothing; see render_condition
        return self.where(field, Operator.IN, list(values))

    def where_not_in(self, field: str, values: Iterable[Any]):
        return self.where(field, Operator.NOT_IN, list(values))

    def where_like(self, field: str, pattern: str):
        return self.where(field, Operator.LIKE, pattern)

    def where_ilike(self, field: str, pattern: str):
        return self.where(field, Operator.ILIKE, pattern)

    def where_null(self, field: str):
        return self.where(field, Operator.IS, None)

    def where_not_null(self, field: str):
        return self.where(field, Operator.IS_NOT, None)

    def where_raw(self, fragment: str, values: Optional[Iterable[Any]] = None):
        """
        Add a raw fragment. Use the configured marker (default `?`) for each
        bound value; markers are renumbered at build time, e.g.
        where_raw("age BETWEEN ? AND ?", [18, 30]) -> "age BETWEEN $2 AND $3".
        """
        self._conditions.append(make_raw(fragment, values))
        return self

    def where_filters(self, filters: Mapping[str, Any]):
        """Add conditions from a filter mapping, e.g. {"age": {"$gte": 18}, "id": [1, 2]}."""
        self._conditions.extend(conditions_from_filters(filters, Dialect.RELATIONAL))
        return self


class _ReturningMixin:
    _returning: List[str]

    def returning(self, fields: FieldList):
        self._returning.extend(_returning_item(f) for f in _as_list(fields))
        return self

    def _returning_clause(self) -> str:
        if not self._returning:
            return ""
        return f" RETURNING {', '.join(self._returning)}"


class SelectQueryBuilder(_WhereMixin):
    def __init__(self, table: str, fields: Optional[FieldList] = None, *,
                 config: Optional[BuilderConfig] = None) -> None:
        self.table = sanitize_qualified(table, context="table name")
        # select-list entries are expressions ("COUNT(*) AS total") and are not sanitized
        self.fields = _as_list(fields) if fields else ["*"]
        self.config = config or get_default_config()
        self._conditions: List[Condition] = []
        self._joins: List[Join] = []
        self._group_by: List[str] = []
        self._having: List[FieldCondition] = []
        self._sort: List[Sort] = []
        self._pagination = Pagination()

    def order_by(self, field: str, direction: Any = "ASC") -> SelectQueryBuilder:
        self._sort.append(Sort(sanitize_qualified(field, context="sort field"), sort_direction(direction)))
        return self

    def limit(self, limit: int) -> SelectQueryBuilder:
        self._pagination.limit = non_negative_int(limit, "limit")
        return self

    def offset(self, offset: int) -> SelectQueryBuilder:
        self._pagination.offset = non_negative_int(offset, "offset")
        return self

    def paginate(self, page: int = 1, page_size: Optional[int] = None) -> SelectQueryBuilder:
        """1-based page numbers: limit=page_size, offset=(page - 1) * page_size."""
        size = self.config.default_page_size if page_size is None else page_size
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise InvalidArgument("QFORGE_INVALID_PAGE", f"page must be an integer >= 1, got {page!r}", page=page)
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise InvalidArgument("QFORGE_INVALID_PAGE_SIZE", f"page_size must be an integer >= 1, got {size!r}",
                                  page_size=size)
        if self.config.max_page_size is not None and size > self.config.max_page_size:
            raise InvalidArgument(
                "QFORGE_PAGE_SIZE_TOO_LARGE",
                f"page_size {size} exceeds the configured maximum {self.config.max_page_size}",
                page_size=size,
                max_page_size=self.config.max_page_size,
            )
        self.limit(size)
        self.offset((page - 1) * size)
        return self

    def group_by(self, fields: FieldList) -> SelectQueryBuilder:
        self._group_by.extend(sanitize_qualified(f, context="group by field") for f in _as_list(fields))
        return self

    def having(self, expression: str, operator: Any, value: Any) -> SelectQueryBuilder:
        """HAVING on a column or a single-argument aggregate, e.g. having("COUNT(*)", ">", 5)."""
        self._having.append(make_condition(expression, operator, value, Dialect.RELATIONAL, allow_aggregate=True))
        return self

    def join(self, table: str, type: Any, condition: str) -> SelectQueryBuilder:
        """Join condition is caller-authored SQL (column comparisons), emitted as-is."""
        join_type = JoinType.parse(type)
        if join_type is None:
            raise InvalidArgument(
                "QFORGE_INVALID_JOIN_TYPE",
                f"Join type must be INNER, LEFT or RIGHT, got {type!r}",
                type=type,
            )
        if not isinstance(condition, str) or not condition.strip():
            raise InvalidArgument("QFORGE_EMPTY_JOIN_CONDITION", "Join condition must be a non-empty string")
        self._joins.append(Join(sanitize_qualified(table, context="join table"), join_type, condition))
        return self

    def inner_join(self, table: str, condition: str) -> SelectQueryBuilder:
        return self.join(table, JoinType.INNER, condition)

    def left_join(self, table: str, condition: str) -> SelectQueryBuilder:
        return self.join(table, JoinType.LEFT, condition)

    def right_join(self, table: str, condition: str) -> SelectQueryBuilder:
        return self.join(table, JoinType.RIGHT, condition)

    def _assemble(self, fields: List[str], *, with_sort_and_page: bool) -> SqlQuery:
        store = PositionalParameters()
        marker = self.config.raw_marker

        query = f"SELECT {', '.join(fields)} FROM {self.table}"

        for join in self._joins:
            query += f" {join.type.value} JOIN {join.table} ON {join.condition}"

        where_sql = render_conditions(self._conditions, store, marker=marker)
        if where_sql:
            query += f" WHERE {where_sql}"

        if self._group_by:
            query += f" GROUP BY {', '.join(self._group_by)}"

        having_sql = render_conditions(self._having, store, marker=marker)
        if having_sql:
            query += f" HAVING {having_sql}"

        if with_sort_and_page:
            if self._sort:
                query += " ORDER BY " + ", ".join(f"{s.field} {s.direction.value}" for s in self._sort)
            if self._pagination.limit is not None:
                query += f" LIMIT {store.add(self._pagination.limit)}"
            if self._pagination.offset is not None:
                query += f" OFFSET {store.add(self._pagination.offset)}"

        logger.debug("Built SQL statement", statement="select", table=self.table, placeholders=len(store))
        return SqlQuery(text=query, params=store.values)

    def build(self) -> SqlQuery:
        return self._assemble(self.fields, with_sort_and_page=True)

    def build_count(self) -> SqlQuery:
        """Same joins, filters, grouping and HAVING; COUNT(*) instead of fields; no ORDER BY or paging."""
        return self._assemble(["COUNT(*) AS total"], with_sort_and_page=False)


class InsertQueryBuilder(_ReturningMixin):
    def __init__(self, table: str, data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]], *,
                 config: Optional[BuilderConfig] = None) -> None:
        self.table = sanitize_qualified(table, context="table name")
        self.config = config or get_default_config()
        rows = [data] if isinstance(data, Mapping) else list(data)
        if not rows:
            raise EmptyMandatoryInput("rows", statement="INSERT")

        # column order comes from the first row
        columns = [sanitize(k, context="column name") for k in rows[0].keys()]
        if not columns:
            raise EmptyMandatoryInput("fields", statement="INSERT")
        expected = set(columns)
        for index, row in enumerate(rows[1:], start=1):
            if set(row.keys()) != expected:
                raise InvalidArgument(
                    "QFORGE_INSERT_ROW_MISMATCH",
                    f"Row {index} has a different set of columns than row 0",
                    row=index,
                    expected=sorted(expected),
                    got=sorted(str(k) for k in row.keys()),
                )

        self.columns = columns
        self.rows = [dict(row) for row in rows]
        self._returning: List[str] = []

    def build(self) -> SqlQuery:
        store = PositionalParameters()
        value_sets = []
        for row in self.rows:
            placeholders = ", ".join(store.add(row[col]) for col in self.columns)
            value_sets.append(f"({placeholders})")

        query = f"INSERT INTO {self.table} ({', '.join(self.columns)}) VALUES {', '.join(value_sets)}"
        query += self._returning_clause()

        logger.debug("Built SQL statement", statement="insert", table=self.table, rows=len(self.rows),
                     placeholders=len(store))
        return SqlQuery(text=query, params=store.values)


class UpdateQueryBuilder(_WhereMixin, _ReturningMixin):
    def __init__(self, table: str, data: Mapping[str, Any], *,
                 config: Optional[BuilderConfig] = None) -> None:
        self.table = sanitize_qualified(table, context="table name")
        self.config = config or get_default_config()
        if not data:
            raise EmptyMandatoryInput("fields", statement="UPDATE")
        self.data = {sanitize(k, context="column name"): v for k, v in data.items()}
        self._conditions: List[Condition] = []
        self._returning: List[str] = []

    def build(self) -> SqlQuery:
        store = PositionalParameters()
        set_parts = [f"{col} = {store.add(value)}" for col, value in self.data.items()]

        query = f"UPDATE {self.table} SET {', '.join(set_parts)}"
        where_sql = render_conditions(self._conditions, store, marker=self.config.raw_marker)
        if where_sql:
            query += f" WHERE {where_sql}"
        query += self._returning_clause()

        logger.debug("Built SQL statement", statement="update", table=self.table, placeholders=len(store))
        return SqlQuery(text=query, params=store.values)


class DeleteQueryBuilder(_WhereMixin, _ReturningMixin):
    def __init__(self, table: str, *, config: Optional[BuilderConfig] = None) -> None:
        self.table = sanitize_qualified(table, context="table name")
        self.config = config or get_default_config()
        self._conditions: List[Condition] = []
        self._returning: List[str] = []

    def build(self) -> SqlQuery:
        store = PositionalParameters()
        query = f"DELETE FROM {self.table}"
        where_sql = render_conditions(self._conditions, store, marker=self.config.raw_marker)
        if where_sql:
            query += f" WHERE {where_sql}"
        query += self._returning_clause()

        logger.debug("Built SQL statement", statement="delete", table=self.table, placeholders=len(store))
        return SqlQuery(text=query, params=store.values)


def select(table: str, fields: Optional[FieldList] = None, *,
           config: Optional[BuilderConfig] = None) -> SelectQueryBuilder:
    return SelectQueryBuilder(table, fields, config=config)


def insert(table: str, data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]], *,
           config: Optional[BuilderConfig] = None) -> InsertQueryBuilder:
    return InsertQueryBuilder(table, data, config=config)


def update(table: str, data: Mapping[str, Any], *,
           config: Optional[BuilderConfig] = None) -> UpdateQueryBuilder:
    return UpdateQueryBuilder(table, data, config=config)


def delete(table: str, *, config: Optional[BuilderConfig] = None) -> DeleteQueryBuilder:
    return DeleteQueryBuilder(table, config=config)


def raw(text: str, params: Optional[Iterable[Any]] = None) -> SqlQuery:
    """Wrap caller-written SQL in the output contract, unchanged."""
    return SqlQuery(text=text, params=list(params or ()))
