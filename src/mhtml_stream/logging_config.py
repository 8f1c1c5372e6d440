"""
Structured logging configuration using structlog.

Log records go to stderr so that command-line output on stdout stays machine readable.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, it may be swapped after configuration
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structlog for structured logging.

    Args:
        level: Log level name, defaults to settings.log_level
        json_output: Render JSON lines instead of console output,
            defaults to settings.log_json
    """
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json_output is None else json_output

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if use_json
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )

