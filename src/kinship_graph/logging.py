"""Structlog-based logging for the kinship graph.

Library code logs through structlog; no print() outside the CLI.
"""
from __future__ import annotations

from typing import Literal

import logging
import structlog

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_LEVEL: LogLevel = "INFO"


def configure_logging(level: LogLevel = "INFO") -> None:
    logging.basicConfig(format="%(message)s", level=getattr(logging, level))
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        cache_logger_on_first_use=True,
    )


def configure_default_logging() -> None:
    """Drop debug events when the host application has not configured structlog.

    Loggers are not cached here, so a later configure_logging() call (or the
    host's own structlog setup) still takes effect.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, DEFAULT_LEVEL)),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "kinship_graph"):
    return structlog.get_logger(name)


# Library default; the CLI replaces it via configure_logging()
configure_default_logging()
