"""Parameterized SQL and Cypher statement builders."""

from .conditions import (
    Contains,
    EndsWith,
    Eq,
    Gt,
    Gte,
    ILike,
    In,
    IsNotNull,
    IsNull,
    Like,
    Lt,
    Lte,
    Ne,
    NotIn,
    StartsWith,
)
from .config import BuilderConfig, get_default_config, load_builder_config, set_default_config
from .errors import (
    EmptyMandatoryInput,
    InvalidArgument,
    InvalidCondition,
    InvalidIdentifier,
    ParameterCountMismatch,
    QForgeException,
)
from .graph import (
    CypherBuilder,
    Pattern,
    create_node,
    create_relationship,
    cypher,
    delete_node,
    find_node,
    update_node,
)
from .relational import (
    DeleteQueryBuilder,
    InsertQueryBuilder,
    SelectQueryBuilder,
    UpdateQueryBuilder,
    delete,
    insert,
    raw,
    select,
    update,
)
from .sanitize import sanitize
from .types import CypherQuery, SqlQuery

__all__ = [
    "BuilderConfig",
    "Contains",
    "CypherBuilder",
    "CypherQuery",
    "DeleteQueryBuilder",
    "EmptyMandatoryInput",
    "EndsWith",
    "Eq",
    "Gt",
    "Gte",
    "ILike",
    "In",
    "InsertQueryBuilder",
    "InvalidArgument",
    "InvalidCondition",
    "InvalidIdentifier",
    "IsNotNull",
    "IsNull",
    "Like",
    "Lt",
    "Lte",
    "Ne",
    "NotIn",
    "ParameterCountMismatch",
    "Pattern",
    "QForgeException",
    "SelectQueryBuilder",
    "SqlQuery",
    "StartsWith",
    "UpdateQueryBuilder",
    "create_node",
    "create_relationship",
    "cypher",
    "delete",
    "delete_node",
    "find_node",
    "get_default_config",
    "insert",
    "load_builder_config",
    "raw",
    "sanitize",
    "select",
    "set_default_config",
    "update",
]
