"""
Reconciliation operations.

Wires settings, log context, the optional owner check and the engine
together, and turns the outcome into an :class:`OperationResult` with a
single human-readable summary. Every :class:`ReconError` becomes a failed
result; anything written to the ledger before the failure stays there.
"""

from __future__ import annotations

from feedrecon.core.completion import mark_completed
from feedrecon.core.errors import ReconError
from feedrecon.core.ingestion import ingest
from feedrecon.core.ledger.base import Ledger
from feedrecon.core.models import CompletionResult, IngestResult
from feedrecon.core.settings import ReconSettings, get_settings
from feedrecon.core.validation import validate_ledger_owner
from feedrecon.framework.logging import clear_context, get_logger, new_run_id, set_context
from feedrecon.framework.sources.protocol import EventSource
from feedrecon.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def check_owner(ledger: Ledger, identity: str | None) -> None:
    """Validate the ledger header against *identity*; skipped when no identity."""
    if not identity:
        return
    owner = validate_ledger_owner(ledger.header_value(), identity)
    logger.info("owner_validated", owner=owner)


# ------------------------------------------------------------------ #
# Ingestion
# ------------------------------------------------------------------ #


def run_ingest(
    source: EventSource,
    ledger: Ledger,
    *,
    settings: ReconSettings | None = None,
    query: str | None = None,
    page_size: int | None = None,
    max_events: int | None = None,
    identity: str | None = None,
) -> OperationResult[IngestResult]:
    """Append new feed records to the ledger and summarise the run."""
    settings = settings or get_settings()
    query = query or settings.ingest_query
    timer = start_timer()
    run_id = new_run_id()
    set_context(run_id=run_id, operation="ingest", source=source.name, query=query, ledger=ledger.location)

    try:
        check_owner(ledger, identity or settings.owner_identity)
        result = ingest(
            source,
            query,
            ledger,
            page_size=page_size or settings.page_size,
            max_events=max_events or settings.ingest_max_events,
            date_format=settings.date_format,
        )
    except ReconError as exc:
        exc.with_context(run_id=run_id, ledger=ledger.location)
        logger.error("ingest_failed", **exc.to_dict())
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms, metadata={"run_id": run_id})
    finally:
        clear_context()

    warnings = []
    if result.watermark is not None and not result.watermark_found:
        warnings.append(
            f"Last ledger key {result.watermark} was not found in the {result.total_fetched} "
            "events read; every record read was treated as new. Check for duplicates "
            "or raise the event ceiling."
        )
    return OperationResult.ok(
        result,
        summary=format_ingest_summary(result),
        warnings=warnings,
        elapsed_ms=timer.elapsed_ms,
        metadata={"run_id": run_id},
    )


def format_ingest_summary(result: IngestResult) -> str:
    lines = ["Processing complete!", ""]
    if result.appended:
        lines.append(f"{len(result.appended)} new record(s) appended to the ledger:")
        lines.extend(result.appended_keys)
    else:
        lines.append("No new records found.")
    lines.append("")
    lines.append(f"Total events processed: {result.total_fetched}")
    lines.append(f"Correlation keys found: {result.keys_found}")
    return "\n".join(lines)


# ------------------------------------------------------------------ #
# Completion marking
# ------------------------------------------------------------------ #


def run_mark_completed(
    source: EventSource,
    ledger: Ledger,
    *,
    settings: ReconSettings | None = None,
    query: str | None = None,
    chunk_size: int | None = None,
    max_events: int | None = None,
    marker: str | None = None,
    identity: str | None = None,
) -> OperationResult[CompletionResult]:
    """Mark ledger rows completed by feed notices and summarise the run."""
    settings = settings or get_settings()
    query = query or settings.completion_query
    marker = marker or settings.completion_marker
    timer = start_timer()
    run_id = new_run_id()
    set_context(run_id=run_id, operation="mark_completed", source=source.name, query=query, ledger=ledger.location)

    try:
        check_owner(ledger, identity or settings.owner_identity)
        result = mark_completed(
            source,
            query,
            ledger,
            chunk_size=chunk_size or settings.chunk_size,
            max_events=max_events or settings.completion_max_events,
            marker=marker,
        )
    except ReconError as exc:
        exc.with_context(run_id=run_id, ledger=ledger.location)
        logger.error("mark_completed_failed", **exc.to_dict())
        return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms, metadata={"run_id": run_id})
    finally:
        clear_context()

    return OperationResult.ok(
        result,
        summary=format_completion_summary(result, marker),
        elapsed_ms=timer.elapsed_ms,
        metadata={"run_id": run_id},
    )


def format_completion_summary(result: CompletionResult, marker: str) -> str:
    if result.ledger_rows == 0:
        return "No records found in the ledger."
    if result.total_fetched == 0:
        return "No completion notices found."

    lines = ["Processing complete!", ""]
    if result.updated_keys:
        lines.append(f'{result.updated_count} record(s) marked "{marker}":')
        lines.append("")
        lines.extend(result.updated_keys)
    else:
        lines.append("No record needed updating.")
        lines.append(f'All matching records were already marked "{marker}".')
    lines.append("")
    lines.append(f"Total events processed: {result.total_fetched}")
    lines.append(f"Total chunks processed: {result.chunks_processed}")
    return "\n".join(lines)


__all__ = [
    "check_owner",
    "run_ingest",
    "run_mark_completed",
    "format_ingest_summary",
    "format_completion_summary",
]
