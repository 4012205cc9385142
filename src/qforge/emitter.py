from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, Optional

from .config import BuilderConfig
from .dialects import get as get_dialect
from .errors import InvalidArgument


def _canonical_json_bytes(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8")


def fingerprint(output: Dict[str, Any]) -> str:
    """
    Deterministic hash of a rendered statement (text + params), usable as a
    prepared-statement or cache key. Metadata is excluded.
    """
    tmp = dict(output)
    tmp.pop("metadata", None)
    return hashlib.sha256(_canonical_json_bytes(tmp)).hexdigest()


def emit_query(
    document: Dict[str, Any],
    dialect_name: Optional[str] = None,
    *,
    config: Optional[BuilderConfig] = None,
) -> Dict[str, Any]:
    """
    Render a declarative query document.

    The dialect comes from `dialect_name` or, failing that, the document's
    own "dialect" key. Returns {"text"|"query", "params", "metadata"}.
    """
    name = dialect_name or document.get("dialect")
    if not name:
        raise InvalidArgument(
            "QFORGE_DOCUMENT_MISSING_DIALECT",
            "No dialect given and the document has no 'dialect' key",
        )
    dialect = get_dialect(name)
    rendered = dialect.render(document, config=config)
    out = rendered.query.to_dict()
    out["metadata"] = dict(rendered.metadata)
    out["metadata"]["fingerprint"] = fingerprint(out)
    return out
