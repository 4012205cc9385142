"""
Render relational query documents through the SQL builders.

Document shape (YAML shown):

    statement: select          # select | insert | update | delete
    table: users
    fields: [id, name]
    where: {status: active, age: {$gte: 18}}
    joins: [{table: orders, type: left, on: "orders.user_id = users.id"}]
    group_by: [status]
    having: [{expression: "COUNT(*)", op: ">", value: 1}]
    order_by: [{field: created_at, direction: desc}]
    page: 2
    page_size: 20
    count: false               # select only: emit the COUNT(*) companion instead
    rows: [{name: a}]          # insert
    set: {name: b}             # update
    returning: [id]
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..config import BuilderConfig
from ..errors import InvalidArgument
from ..relational import delete, insert, select, update
from .base import RenderResult, require
from .registry import register


def _order_items(document: Dict[str, Any]):
    for item in document.get("order_by") or []:
        if isinstance(item, str):
            yield item, "ASC"
        else:
            yield require(item, "field", "order_by entry"), item.get("direction", "ASC")


class PostgresDialect:
    name = "postgres"
    paramstyle = "numeric_dollar"  # $1, $2, ...

    def render(self, document: Dict[str, Any], *, config: Optional[BuilderConfig] = None) -> RenderResult:
        statement = str(document.get("statement", "select")).lower()
        table = require(document, "table", f"{statement} document")

        if statement == "select":
            b = select(table, document.get("fields"), config=config)
            for join in document.get("joins") or []:
                b.join(require(join, "table", "join"), join.get("type", "INNER"), require(join, "on", "join"))
            if document.get("where"):
                b.where_filters(document["where"])
            if document.get("group_by"):
                b.group_by(document["group_by"])
            for h in document.get("having") or []:
                key = "field" if isinstance(h, dict) and "expression" not in h and "field" in h else "expression"
                b.having(require(h, key, "having entry"), h.get("op", "="), h.get("value"))
            for field, direction in _order_items(document):
                b.order_by(field, direction)
            if "page" in document or "page_size" in document:
                b.paginate(document.get("page", 1), document.get("page_size"))
            if document.get("limit") is not None:
                b.limit(document["limit"])
            if document.get("offset") is not None:
                b.offset(document["offset"])
            query = b.build_count() if document.get("count") else b.build()

        elif statement == "insert":
            rows = require(document, "rows", f"{statement} document")
            ib = insert(table, rows, config=config)
            if document.get("returning"):
                ib.returning(document["returning"])
            query = ib.build()

        elif statement == "update":
            ub = update(table, require(document, "set", f"{statement} document"), config=config)
            if document.get("where"):
                ub.where_filters(document["where"])
            if document.get("returning"):
                ub.returning(document["returning"])
            query = ub.build()

        elif statement == "delete":
            db = delete(table, config=config)
            if document.get("where"):
                db.where_filters(document["where"])
            if document.get("returning"):
                db.returning(document["returning"])
            query = db.build()

        else:
            raise InvalidArgument(
                "QFORGE_UNKNOWN_STATEMENT",
                f"Unknown statement '{statement}'. Expected select, insert, update or delete",
                statement=statement,
            )

        meta = {"dialect": self.name, "paramstyle": self.paramstyle, "statement": statement}
        return RenderResult(query=query, metadata=meta)


register(PostgresDialect())
