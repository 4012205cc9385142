from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from ..config import BuilderConfig
from ..errors import InvalidArgument
from ..types import CypherQuery, SqlQuery


@dataclass(frozen=True)
class RenderResult:
    query: Union[SqlQuery, CypherQuery]
    metadata: Dict[str, Any]  # e.g. {"dialect": "...", "paramstyle": "numeric_dollar"}


class QueryDialect(Protocol):
    name: str
    paramstyle: str  # "numeric_dollar" ($1) | "named_dollar" ($name)

    def render(self, document: Dict[str, Any], *, config: Optional[BuilderConfig] = None) -> RenderResult: ...


def require(section: Any, key: str, where: str) -> Any:
    """Fetch a mandatory key from a document section, raising an input error instead of KeyError."""
    if not isinstance(section, Mapping):
        raise InvalidArgument(
            "QFORGE_DOCUMENT_BAD_SECTION",
            f"{where} must be a mapping, got {type(section).__name__}",
            section=where,
        )
    if key not in section:
        raise InvalidArgument(
            "QFORGE_DOCUMENT_MISSING_KEY",
            f"{where} is missing required key '{key}'",
            key=key,
            section=where,
        )
    return section[key]
