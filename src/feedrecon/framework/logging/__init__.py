"""
feedrecon logging - structured, run-aware logging.

Usage:
    from feedrecon.framework.logging import configure_logging, get_logger, set_context

    configure_logging()
    log = get_logger(__name__)
    set_context(run_id="3f2a9c1b0d4e", operation="ingest")

    with log_step("ingest.append", rows=3):
        append_rows()
"""

from feedrecon.framework.logging.config import configure_logging
from feedrecon.framework.logging.context import (
    LogContext,
    clear_context,
    get_context,
    get_logger,
    new_run_id,
    push_context,
    set_context,
)
from feedrecon.framework.logging.timing import log_step

__all__ = [
    "configure_logging",
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "push_context",
    "new_run_id",
    "LogContext",
    "log_step",
]
