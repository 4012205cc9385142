from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Dialect(str, Enum):
    RELATIONAL = "relational"
    GRAPH = "graph"


class Operator(str, Enum):
    EQ = "="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    NE = "<>"
    LIKE = "LIKE"
    ILIKE = "ILIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    IS = "IS"
    IS_NOT = "IS NOT"
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS WITH"
    ENDS_WITH = "ENDS WITH"

    @classmethod
    def parse(cls, raw: Any) -> Optional["Operator"]:
        """Normalize a caller operator ("!=", "not  in", Operator.GT) or return None."""
        if isinstance(raw, Operator):
            return raw
        if not isinstance(raw, str):
            return None
        text = " ".join(raw.split()).upper()
        if text == "!=":
            text = "<>"
        try:
            return cls(text)
        except ValueError:
            return None

    @property
    def is_list(self) -> bool:
        return self in (Operator.IN, Operator.NOT_IN)


# operators that only make sense in one grammar
RELATIONAL_ONLY = frozenset({Operator.LIKE, Operator.ILIKE})
GRAPH_ONLY = frozenset({Operator.CONTAINS, Operator.STARTS_WITH, Operator.ENDS_WITH})


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @classmethod
    def parse(cls, raw: Any) -> Optional["JoinType"]:
        if isinstance(raw, JoinType):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return None


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, raw: Any) -> Optional["SortDirection"]:
        if isinstance(raw, SortDirection):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return None


class RelDirection(str, Enum):
    OUT = "->"
    IN = "<-"
    BOTH = "-"


@dataclass(frozen=True)
class FieldCondition:
    field: str
    operator: Operator
    value: Any = None


@dataclass(frozen=True)
class RawCondition:
    raw: str
    bound_values: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Join:
    table: str
    type: JoinType
    condition: str


@dataclass(frozen=True)
class Sort:
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass
class Pagination:
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class SqlQuery:
    """Relational output: `$1..$N` in `text` index into `params` positionally."""
    text: str
    params: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "params": list(self.params)}


@dataclass(frozen=True)
class CypherQuery:
    """Graph output: `$name` in `query` refers to a key of `params`."""
    query: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"query": self.query, "params": dict(self.params)}
