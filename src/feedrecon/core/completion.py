"""
Completion scanner: mark ledger rows whose documents were signed by all parties.

The feed of completion notices is read newest-first in fixed-size chunks.
Each notice carries a correlation key; the first ledger row with that key
gets the completion marker in its status column unless it already has it.

A chunk in which every key resolves to an already-completed row means the
scan has caught up with earlier runs, so older chunks are not fetched.
Running the scan twice with no new notices therefore costs one chunk and
writes nothing.

Matching rules:
    - keys are compared as text against the normalised key cell
    - duplicate ledger keys: the first row wins
    - a key with no row is an orphan and is ignored
    - a status is never moved away from the marker
"""

from __future__ import annotations

from feedrecon.core.errors import InvalidConfigError, ReconError
from feedrecon.core.extractors import COMPLETED_TRANSFER, KeyExtractor
from feedrecon.core.ledger.base import Ledger
from feedrecon.core.models import ClassifiedEvent, CompletionResult, Event, EventOutcome, LedgerRow
from feedrecon.framework.logging import get_logger, log_step
from feedrecon.framework.sources.protocol import EventSource

DEFAULT_MARKER = "ok"

log = get_logger(__name__)


def build_key_index(rows: list[LedgerRow]) -> dict[str, int]:
    """Map each key to the index of the first row holding it."""
    index: dict[str, int] = {}
    for row in rows:
        if row.key is not None:
            index.setdefault(row.key, row.row_index)
    return index


def classify_completion_event(
    event: Event,
    extractor: KeyExtractor,
    key_index: dict[str, int],
    statuses: dict[int, str | None],
    marker: str,
) -> ClassifiedEvent:
    """Decide what a completion notice means for the ledger. Pure."""
    key = extractor.extract(event.subject)
    if key is None:
        return ClassifiedEvent(event=event, key=None, outcome=EventOutcome.UNPARSED)
    row_index = key_index.get(key)
    if row_index is None:
        return ClassifiedEvent(event=event, key=key, outcome=EventOutcome.ORPHAN)
    if statuses.get(row_index) == marker:
        return ClassifiedEvent(event=event, key=key, outcome=EventOutcome.ALREADY_COMPLETE, row_index=row_index)
    return ClassifiedEvent(event=event, key=key, outcome=EventOutcome.MATCHED, row_index=row_index)


def mark_completed(
    source: EventSource,
    query: str,
    ledger: Ledger,
    *,
    chunk_size: int = 50,
    max_events: int = 200,
    marker: str = DEFAULT_MARKER,
    extractor: KeyExtractor = COMPLETED_TRANSFER,
) -> CompletionResult:
    """
    Flag ledger rows matched by completion notices.

    Args:
        source: Paginated newest-first feed.
        query: Feed query selecting completion notices.
        ledger: Ledger whose status column is updated.
        chunk_size: Events per chunk (clamped to the source cap).
        max_events: Ceiling on events requested per invocation.
        marker: Value written to the status column.
        extractor: Key extractor for the subjects.

    Returns:
        :class:`CompletionResult` with updated keys and counters.

    Raises:
        InvalidConfigError: Non-positive sizes or an empty marker.
        ReconError: Any feed or ledger failure; rows marked before the
            failure stay marked.
    """
    if chunk_size < 1:
        raise InvalidConfigError(f"chunk_size must be >= 1, got {chunk_size}")
    if max_events < 1:
        raise InvalidConfigError(f"max_events must be >= 1, got {max_events}")
    if not marker or not marker.strip():
        raise InvalidConfigError("Completion marker must not be empty")

    effective_chunk = min(chunk_size, source.max_page_size)
    if effective_chunk < chunk_size:
        log.warning("completion.chunk_size_clamped", requested=chunk_size, cap=source.max_page_size)

    result = CompletionResult()
    try:
        rows = ledger.rows()
        result.ledger_rows = len(rows)
        if not rows:
            log.info("completion.empty_ledger")
            return result

        key_index = build_key_index(rows)
        statuses: dict[int, str | None] = {row.row_index: row.status for row in rows}
        log.info("completion.start", rows=len(rows), keys=len(key_index), max_events=max_events)

        offset = 0
        while offset < max_events:
            limit = min(effective_chunk, max_events - offset)
            chunk_number = result.chunks_processed + 1
            with log_step("completion.fetch_chunk", level="debug", chunk=chunk_number, offset=offset, limit=limit) as timer:
                chunk = source.fetch(query, offset, limit)
                timer.add_metric("events", len(chunk))
            result.fetch_calls += 1

            if not chunk:
                log.info("completion.feed_exhausted", offset=offset)
                break

            result.total_fetched += len(chunk)
            keys_in_chunk, updated_in_chunk = _process_chunk(
                chunk, ledger, extractor, key_index, statuses, marker, result
            )
            result.chunks_processed += 1
            log.info(
                "completion.chunk_done",
                chunk=chunk_number,
                events=len(chunk),
                keys=keys_in_chunk,
                updated=updated_in_chunk,
            )

            if keys_in_chunk > 0 and updated_in_chunk == 0:
                result.early_terminated = True
                log.info("completion.caught_up", chunk=chunk_number)
                break

            offset += limit

        ledger.commit()
    except ReconError as e:
        e.with_context(
            operation="mark_completed",
            query=query,
            total_fetched=result.total_fetched,
            updated=result.updated_count,
        )
        raise

    log.info(
        "completion.complete",
        updated=result.updated_count,
        total_fetched=result.total_fetched,
        chunks=result.chunks_processed,
        early_terminated=result.early_terminated,
    )
    return result


def _process_chunk(
    chunk: list[Event],
    ledger: Ledger,
    extractor: KeyExtractor,
    key_index: dict[str, int],
    statuses: dict[int, str | None],
    marker: str,
    result: CompletionResult,
) -> tuple[int, int]:
    """Classify and apply one chunk; return (keys extracted, rows updated)."""
    keys = 0
    updated = 0
    for event in chunk:
        classified = classify_completion_event(event, extractor, key_index, statuses, marker)
        result.classified.append(classified)
        if classified.key is not None:
            keys += 1

        if classified.outcome is EventOutcome.MATCHED:
            ledger.set_status(classified.row_index, marker)
            statuses[classified.row_index] = marker
            result.updated_keys.append(classified.key)
            result.updated_rows.append(classified.row_index)
            updated += 1
            log.debug("completion.row_marked", key=classified.key, row=classified.row_index)
        elif classified.outcome is EventOutcome.ALREADY_COMPLETE:
            log.debug("completion.already_marked", key=classified.key, row=classified.row_index)
    return keys, updated


__all__ = [
    "DEFAULT_MARKER",
    "mark_completed",
    "build_key_index",
    "classify_completion_event",
]
