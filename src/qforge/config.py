"""
Builder config loading.

Loads YAML/JSON config files and returns typed config objects. Every builder
factory accepts `config=`; without it the process default is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class BuilderConfig:
    """Knobs shared by the relational and graph builders."""

    raw_marker: str = "?"
    graph_clause_separator: str = "\n"
    default_page_size: int = 10
    max_page_size: Optional[int] = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(self.raw_marker, str) or not self.raw_marker or self.raw_marker.isspace():
            raise ValueError("raw_marker must be a non-blank string")
        if "$" in self.raw_marker:
            raise ValueError("raw_marker must not contain '$'")
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be >= 1")
        if self.max_page_size is not None and self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must be >= default_page_size")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> BuilderConfig:
        b = d.get("builder") or {}
        if not isinstance(b, dict):
            raise ValueError("'builder' section must be a mapping")
        max_page = b.get("max_page_size")
        return cls(
            raw_marker=str(b.get("raw_marker", "?")),
            graph_clause_separator=str(b.get("graph_clause_separator", "\n")),
            default_page_size=int(b.get("default_page_size", 10)),
            max_page_size=int(max_page) if max_page is not None else None,
            log_level=str(b.get("log_level", "WARNING")).upper(),
        )


_DEFAULT = BuilderConfig()


def get_default_config() -> BuilderConfig:
    return _DEFAULT


def set_default_config(config: BuilderConfig) -> None:
    global _DEFAULT
    _DEFAULT = config


def load_builder_config(path: str) -> BuilderConfig:
    """
    Load builder configuration from a YAML or JSON file.

    The file must contain a mapping. Settings live under an optional
    top-level 'builder' key; missing keys fall back to defaults.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(
            "QFORGE_CONFIG_NOT_FOUND",
            f"Config not found: {path}",
            details={"path": path},
            remediation="Verify the path is correct and the file exists.",
        )
    text = p.read_text(encoding="utf-8")
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(
            "QFORGE_CONFIG_PARSE_ERROR",
            f"Failed to parse config: {path}",
            details={"path": path, "error": repr(e)},
            remediation="Ensure the file is valid YAML or JSON encoded in UTF-8.",
            cause=e,
        )
    if not isinstance(obj, dict):
        raise ConfigError(
            "QFORGE_CONFIG_TOPLEVEL_NOT_OBJECT",
            f"Config file must be a YAML/JSON object, got {type(obj).__name__}",
            details={"path": path, "type": type(obj).__name__},
            remediation="Wrap the config in a mapping at the top-level.",
        )
    try:
        return BuilderConfig.from_dict(obj)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            "QFORGE_CONFIG_INVALID_VALUE",
            f"Invalid builder config: {e}",
            details={"path": path},
            remediation="Fix the offending value under the 'builder' key.",
            cause=e,
        )
