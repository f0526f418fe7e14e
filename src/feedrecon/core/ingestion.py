"""
Ingestion cursor: append feed events newer than the ledger's last row.

The feed can only be read newest-first, while the ledger must grow
oldest-first. The cursor therefore pages backwards through the feed until
it meets the ledger's last known key (the watermark), keeps everything
strictly newer than it, and appends that suffix in reverse.

Manifesto:
    The watermark is not stored anywhere: it *is* the key in the ledger's
    last row, read once at the start of each invocation. That keeps the
    ledger the single source of truth and makes a run restartable by
    construction, since appending rows moves the watermark forward.

    - **Ordering correction:** appended rows are oldest-first.
    - **Watermark cutoff:** nothing at or beyond the watermark is appended.
    - **Bounded work:** at most ``ceil(max_events / page_size)`` fetches.
    - **Silent skip:** subjects without a key contribute nothing.

Architecture:
    ::

        ledger.last_row()  ──►  watermark (e.g. 101)

        feed (newest-first)      page 0              page 1
        ┌──────────────────┬──────────────────┐
        │ 104  103  102 ?? │ 101  100  99  ...│   stop: watermark seen
        └──────────────────┴──────────────────┘
          new suffix = [104, 103, 102]   (?? = no key, dropped)
          appended   = 102, 103, 104

Guardrails:
    ❌ DON'T: Sort by key to restore order (keys are not guaranteed monotonic)
    ✅ DO: Reverse the feed order, which is chronological by construction

    ❌ DON'T: Treat a missing watermark as an error
    ✅ DO: Report ``watermark_found=False``; everything fetched is new

Known gap:
    When the ledger has a watermark but it is not found within
    ``max_events``, everything fetched is appended. If the ceiling is too
    low for the feed volume a later run can append duplicates. The result
    flags this with ``watermark_found=False`` so callers can warn.

Tags:
    ingestion, watermark, cursor, pagination, ordering, feedrecon
"""

from __future__ import annotations

from datetime import datetime

from feedrecon.core.errors import InvalidConfigError, ReconError
from feedrecon.core.extractors import NEW_DOCUMENT, KeyExtractor, parse_numeric_key
from feedrecon.core.ledger.base import Ledger
from feedrecon.core.models import ClassifiedEvent, Event, EventOutcome, IngestResult
from feedrecon.framework.logging import get_logger, log_step
from feedrecon.framework.sources.protocol import EventSource

DEFAULT_DATE_FORMAT = "%d/%m/%Y"

log = get_logger(__name__)


def read_watermark(ledger: Ledger) -> int | None:
    """Numeric key of the ledger's last row, ``None`` when there is none."""
    last = ledger.last_row()
    if last is None:
        return None
    return parse_numeric_key(last.key)


def find_watermark(keys: list[str | None], watermark: int | None) -> int | None:
    """Index of the first key equal to *watermark* (numerically), or ``None``."""
    if watermark is None:
        return None
    for index, key in enumerate(keys):
        if key is not None and int(key) == watermark:
            return index
    return None


def ingest(
    source: EventSource,
    query: str,
    ledger: Ledger,
    *,
    page_size: int = 100,
    max_events: int = 2000,
    extractor: KeyExtractor = NEW_DOCUMENT,
    date_format: str = DEFAULT_DATE_FORMAT,
    watermark: int | None = None,
) -> IngestResult:
    """
    Append feed events newer than the ledger's last row, oldest first.

    Args:
        source: Paginated newest-first feed.
        query: Feed query selecting new-document events.
        ledger: Ledger to append to.
        page_size: Events requested per call (clamped to the source cap).
        max_events: Ceiling on events requested per invocation.
        extractor: Key extractor for the subjects.
        date_format: ``strftime`` format of the received-date column.
        watermark: Override the watermark instead of reading the ledger.

    Returns:
        :class:`IngestResult` with the appended keys and fetch counters.

    Raises:
        InvalidConfigError: Non-positive ``page_size`` or ``max_events``.
        ReconError: Any feed or ledger failure; rows appended before the
            failure stay in the ledger.
    """
    if page_size < 1:
        raise InvalidConfigError(f"page_size must be >= 1, got {page_size}")
    if max_events < 1:
        raise InvalidConfigError(f"max_events must be >= 1, got {max_events}")

    effective_page = min(page_size, source.max_page_size)
    if effective_page < page_size:
        log.warning("ingest.page_size_clamped", requested=page_size, cap=source.max_page_size)

    result = IngestResult()
    try:
        result.watermark = watermark if watermark is not None else read_watermark(ledger)
        log.info("ingest.start", watermark=result.watermark, max_events=max_events)

        fetched = _collect(source, query, effective_page, max_events, extractor, result)
        keys = [key for _, key in fetched]
        cut = find_watermark(keys, result.watermark)
        result.watermark_found = cut is not None
        new_count = cut if cut is not None else len(fetched)

        for position, (event, key) in enumerate(fetched):
            if key is None:
                outcome = EventOutcome.UNPARSED
            elif position < new_count:
                outcome = EventOutcome.NEW
            else:
                outcome = EventOutcome.KNOWN
            result.classified.append(ClassifiedEvent(event=event, key=key, outcome=outcome))

        if result.watermark is not None and not result.watermark_found:
            log.warning(
                "ingest.watermark_not_found",
                watermark=result.watermark,
                total_fetched=result.total_fetched,
            )

        new_entries = [(key, event.received_at) for event, key in fetched[:new_count] if key is not None]
        _append(ledger, list(reversed(new_entries)), date_format, result)
        ledger.commit()
    except ReconError as e:
        e.with_context(
            operation="ingest",
            query=query,
            total_fetched=result.total_fetched,
            appended=len(result.appended),
        )
        raise

    log.info(
        "ingest.complete",
        appended=len(result.appended),
        total_fetched=result.total_fetched,
        pages=result.pages_fetched,
        watermark_found=result.watermark_found,
    )
    return result


def _collect(
    source: EventSource,
    query: str,
    page_size: int,
    max_events: int,
    extractor: KeyExtractor,
    result: IngestResult,
) -> list[tuple[Event, str | None]]:
    """Page through the feed until watermark, exhaustion or ceiling."""
    fetched: list[tuple[Event, str | None]] = []
    offset = 0

    while offset < max_events:
        limit = min(page_size, max_events - offset)
        with log_step("ingest.fetch_page", level="debug", offset=offset, limit=limit) as timer:
            page = source.fetch(query, offset, limit)
            timer.add_metric("events", len(page))
        result.pages_fetched += 1

        if not page:
            log.info("ingest.feed_exhausted", offset=offset)
            break

        result.total_fetched += len(page)
        page_keys = [(event, extractor.extract(event.subject)) for event in page]
        fetched.extend(page_keys)

        if find_watermark([key for _, key in page_keys], result.watermark) is not None:
            log.info("ingest.watermark_found", watermark=result.watermark, offset=offset)
            break

        offset += limit
    else:
        log.info("ingest.ceiling_reached", max_events=max_events)

    return fetched


def _append(
    ledger: Ledger,
    entries: list[tuple[str, datetime]],
    date_format: str,
    result: IngestResult,
) -> None:
    if not entries:
        log.info("ingest.nothing_new")
        return
    with log_step("ingest.append", rows=len(entries)):
        for key, received_at in entries:
            row_index = ledger.append_row(key, received_at.strftime(date_format))
            result.appended.append((key, received_at))
            log.debug("ingest.row_appended", key=key, row=row_index)


__all__ = [
    "DEFAULT_DATE_FORMAT",
    "ingest",
    "read_watermark",
    "find_watermark",
]
