from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional


class ExitCode(int, Enum):
    OK = 0
    CONFIG_INVALID = 10
    INVALID_INPUT = 20
    RUNTIME_ERROR = 30
    INTERNAL_ERROR = 50


@dataclass(frozen=True)
class QForgeProblem:
    code: str                 # stable machine code, e.g. "QFORGE_INVALID_IDENTIFIER"
    category: str             # "config" | "input" | "runtime" | "internal"
    message: str              # short human message
    details: Dict[str, Any]   # structured details for debugging the caller
    remediation: Optional[str] = None  # actionable next step


class QForgeException(Exception):
    def __init__(
        self,
        problem: QForgeProblem,
        exit_code: ExitCode,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(problem.message)
        self.problem = problem
        self.exit_code = exit_code
        self.cause = cause


def _input_problem(code: str, message: str, details: Dict[str, Any], remediation: Optional[str]) -> QForgeProblem:
    return QForgeProblem(
        code=code,
        category="input",
        message=message,
        details=details,
        remediation=remediation,
    )


class InvalidIdentifier(QForgeException):
    """A caller-supplied name cannot be interpolated as a bare identifier."""

    def __init__(self, name: Any, *, context: str = "identifier") -> None:
        super().__init__(
            _input_problem(
                "QFORGE_INVALID_IDENTIFIER",
                f"Invalid {context}: {name!r}",
                {"name": name, "context": context},
                "Identifiers may only contain letters, digits and underscores.",
            ),
            ExitCode.INVALID_INPUT,
        )
        self.name = name


class EmptyMandatoryInput(QForgeException):
    """A statement was given no data where data is required (INSERT rows, UPDATE SET)."""

    def __init__(self, what: str, *, statement: str) -> None:
        super().__init__(
            _input_problem(
                "QFORGE_EMPTY_INPUT",
                f"No {what} provided for {statement}",
                {"what": what, "statement": statement},
                f"Pass at least one {what.rstrip('s')} to the {statement} builder.",
            ),
            ExitCode.INVALID_INPUT,
        )


class InvalidCondition(QForgeException):
    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(
            _input_problem("QFORGE_INVALID_CONDITION", message, dict(details), None),
            ExitCode.INVALID_INPUT,
        )


class ParameterCountMismatch(QForgeException):
    def __init__(self, fragment: str, markers: int, values: int) -> None:
        super().__init__(
            _input_problem(
                "QFORGE_PARAMETER_COUNT_MISMATCH",
                f"Raw fragment has {markers} placeholder marker(s) but {values} value(s) were supplied",
                {"fragment": fragment, "markers": markers, "values": values},
                "Use one marker per bound value in raw fragments.",
            ),
            ExitCode.INVALID_INPUT,
        )


class InvalidArgument(QForgeException):
    def __init__(self, code: str, message: str, **details: Any) -> None:
        super().__init__(
            _input_problem(code, message, dict(details), None),
            ExitCode.INVALID_INPUT,
        )


class ConfigError(QForgeException):
    def __init__(self, code: str, message: str, *, details: Dict[str, Any], remediation: str,
                 cause: Optional[BaseException] = None) -> None:
        super().__init__(
            QForgeProblem(
                code=code,
                category="config",
                message=message,
                details=details,
                remediation=remediation,
            ),
            ExitCode.CONFIG_INVALID,
            cause=cause,
        )


class UnknownDialect(QForgeException):
    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            QForgeProblem(
                code="QFORGE_UNKNOWN_DIALECT",
                category="config",
                message=f"Unknown dialect '{name}'. Available: {', '.join(available)}",
                details={"name": name, "available": available},
                remediation="Pick one of the registered dialects (`qforge dialects`).",
            ),
            ExitCode.CONFIG_INVALID,
        )


def problem_to_dict(p: QForgeProblem) -> Dict[str, Any]:
    d = asdict(p)
    if d.get("remediation") is None:
        d.pop("remediation", None)
    return d
