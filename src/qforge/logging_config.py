"""
Configure qforge logging.

Library modules log through `get_logger(__name__)`, a structlog wrapper around
the standard library logger of the same name, so nothing is printed until the
host application configures logging. Applications (and the `qforge` CLI) call
`setup_logging()` once at startup.
"""

from __future__ import annotations

import logging as stdlib_logging
import sys

import structlog


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.wrap_logger(stdlib_logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def setup_logging(level: str = "WARNING") -> None:
    """
    Route structlog through the standard library root logger with a console
    renderer on stderr. Safe to call more than once; handlers are replaced.
    """
    level = level.upper()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%m/%d/%Y, %H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    handler = stdlib_logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = stdlib_logging.getLogger()
    for h in root_logger.handlers[:]:
        root_logger.removeHandler(h)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    structlog.get_logger(__name__).debug("qforge logging configured", level=level)
