"""
Operations layer for feedrecon.

Entry points used by the CLI (and any other caller) to run a
reconciliation and get back an :class:`OperationResult` with a
human-readable summary.
"""

from feedrecon.ops.reconcile import (
    check_owner,
    format_completion_summary,
    format_ingest_summary,
    run_ingest,
    run_mark_completed,
)
from feedrecon.ops.result import OperationError, OperationResult, start_timer

__all__ = [
    "OperationError",
    "OperationResult",
    "start_timer",
    "check_owner",
    "run_ingest",
    "run_mark_completed",
    "format_ingest_summary",
    "format_completion_summary",
]
