# src/qforge/cli.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .config import BuilderConfig, get_default_config, load_builder_config
from .dialects import available as available_dialects
from .emitter import emit_query
from .errors import ConfigError, ExitCode, QForgeException, problem_to_dict
from .logging_config import get_logger, setup_logging
from .sanitize import is_valid_identifier

logger = get_logger(__name__)


# =============================================================================
# Helpers: document IO + formatting
# =============================================================================

def _print_payload(payload: Dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True, default=str))
    elif fmt == "jsonl":
        print(json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str))
    else:
        # "text": caller prints human-friendly output
        pass


def _load_document(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(
            "QFORGE_DOCUMENT_NOT_FOUND",
            f"Query document not found: {path}",
            details={"path": path},
            remediation="Verify the path is correct and the file exists.",
        )
    try:
        obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(
            "QFORGE_DOCUMENT_PARSE_ERROR",
            f"Failed to parse query document: {path}",
            details={"path": path, "error": repr(e)},
            remediation="Ensure the file is valid YAML or JSON encoded in UTF-8.",
            cause=e,
        )
    if not isinstance(obj, dict):
        raise ConfigError(
            "QFORGE_DOCUMENT_TOPLEVEL_NOT_OBJECT",
            f"Query document must be an object at top-level: {path}",
            details={"path": path, "type": type(obj).__name__},
            remediation="Wrap the query document in a mapping at the top-level.",
        )
    return obj


def _write_text(path: str | Path, text: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


def _resolve_config(args: argparse.Namespace) -> BuilderConfig:
    if getattr(args, "config", None):
        return load_builder_config(args.config)
    return get_default_config()


# =============================================================================
# Commands
# =============================================================================

def cmd_build(args: argparse.Namespace) -> int:
    cfg = _resolve_config(args)
    document = _load_document(args.query)
    out = emit_query(document, args.dialect, config=cfg)
    logger.info("Rendered query document", path=args.query, dialect=out["metadata"]["dialect"])

    if args.out:
        _write_text(args.out, json.dumps(out, indent=2, ensure_ascii=False, sort_keys=True, default=str) + "\n")

    if args.format in ("json", "jsonl"):
        _print_payload({"ok": True, **out}, args.format)
    else:
        print(out.get("text", out.get("query")))
        print(f"-- params: {json.dumps(out['params'], ensure_ascii=False, default=str)}")
    return int(ExitCode.OK)


def cmd_check_identifier(args: argparse.Namespace) -> int:
    results = {name: is_valid_identifier(name) for name in args.names}
    ok = all(results.values())

    if args.format in ("json", "jsonl"):
        _print_payload({"ok": ok, "identifiers": results}, args.format)
    else:
        for name, valid in results.items():
            print(f"{'OK' if valid else 'INVALID'}: {name}")
    return int(ExitCode.OK if ok else ExitCode.INVALID_INPUT)


def cmd_dialects(args: argparse.Namespace) -> int:
    rows = {name: d.paramstyle for name, d in sorted(available_dialects().items())}
    if args.format in ("json", "jsonl"):
        _print_payload({"ok": True, "dialects": rows}, args.format)
    else:
        for name, style in rows.items():
            print(f"{name}\tparamstyle={style}")
    return int(ExitCode.OK)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qforge", description="Build parameterized SQL and Cypher statements.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR (default from config)")
    sub = parser.add_subparsers(dest="cmd")

    def add_format(p: argparse.ArgumentParser) -> None:
        p.add_argument("--format", choices=["text", "json", "jsonl"], default="text")

    p_build = sub.add_parser("build", help="Render a YAML/JSON query document")
    p_build.add_argument("--query", required=True, help="Path to the query document")
    p_build.add_argument("--dialect", default=None, help="Dialect name (overrides the document's 'dialect')")
    p_build.add_argument("--config", default=None, help="Builder config file (YAML/JSON)")
    p_build.add_argument("--out", default=None, help="Also write the JSON result to this path")
    add_format(p_build)
    p_build.set_defaults(func=cmd_build)

    p_check = sub.add_parser("check-identifier", help="Check names against the identifier rules")
    p_check.add_argument("names", nargs="+")
    add_format(p_check)
    p_check.set_defaults(func=cmd_check_identifier)

    p_dialects = sub.add_parser("dialects", help="List registered dialects")
    add_format(p_dialects)
    p_dialects.set_defaults(func=cmd_dialects)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Entry point used by the console script: `from qforge.cli import main`.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "cmd", None):
        parser.print_help()
        return 2

    fmt = getattr(args, "format", "text")
    try:
        setup_logging(args.log_level or _resolve_config(args).log_level)
        return int(args.func(args))
    except QForgeException as e:
        payload = {"ok": False, "error": problem_to_dict(e.problem), "exit_code": int(e.exit_code)}
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            err = payload["error"]
            print(f"ERROR[{err.get('code', 'QFORGE_ERROR')}]: {err.get('message')}", file=sys.stderr)
            if err.get("remediation"):
                print(f"REMEDIATION: {err['remediation']}", file=sys.stderr)
            print(f"DETAILS: {err.get('details', {})}", file=sys.stderr)
        return int(e.exit_code)
    except Exception as e:
        logger.error("Unexpected failure", error=repr(e), exc_info=True)
        payload = {
            "ok": False,
            "error": {"code": "QFORGE_INTERNAL_ERROR", "category": "internal", "message": repr(e), "details": {}},
            "exit_code": int(ExitCode.INTERNAL_ERROR),
        }
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            print(f"ERROR[QFORGE_INTERNAL_ERROR]: {e!r}", file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


if __name__ == "__main__":
    sys.exit(main())
