"""
Structured logging using structlog.

JSON output for running as a service, console output when debugging
from a terminal. Modules log through get_logger and pass context as
key value pairs, never as formatted strings.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, List

import structlog
from structlog.types import Processor


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Configure structlog on top of standard library logging.

    level
      Standard level name, DEBUG, INFO, WARNING, ERROR.

    fmt
      "json" for machine readable lines, anything else for console output.
    """
    shared_processors: List[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        format_processors: List[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        format_processors = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=shared_processors + format_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # MCP stdio transport owns stdout, so logs go to stderr.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def get_logger(name: str | None = None, **initial_context: Any) -> Any:
    """
    Return a structlog logger, optionally bound to initial context.

    Example:
      log = get_logger(__name__, output="log:/var/log/flows.json")
      log.warning("hook_failed", hook="add-hostname")
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
