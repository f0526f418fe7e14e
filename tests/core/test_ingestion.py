"""
Tests for feedrecon.core.ingestion.

Tests cover:
- Oldest-first append order
- Watermark cutoff (early stop on the page holding the watermark)
- Empty ledger and missing watermark
- Bounded fetching (ceiling, short final page, exhaustion)
- Subjects without a key
- Page-size clamping and argument validation
- Partial progress on a mid-run failure
"""

from datetime import timedelta

import pytest

from feedrecon.core.errors import InvalidConfigError, LedgerError, NetworkError, SourceError
from feedrecon.core.ingestion import find_watermark, ingest, read_watermark
from feedrecon.core.ledger import MemoryLedger
from feedrecon.core.models import EventOutcome
from feedrecon.framework.sources import MemoryEventSource
from tests._support import (
    BASE_TIME,
    INGEST_QUERY,
    column,
    ledger_with,
    new_document,
    new_documents,
    noise,
)


def _source(keys, **kwargs):
    return MemoryEventSource({INGEST_QUERY: new_documents(keys)}, **kwargs)


# =============================================================================
# Helpers
# =============================================================================


class TestWatermarkHelpers:
    def test_read_watermark_empty_ledger(self):
        assert read_watermark(MemoryLedger()) is None

    def test_read_watermark_header_only(self):
        assert read_watermark(ledger_with([])) is None

    def test_read_watermark_last_row(self):
        assert read_watermark(ledger_with([100, 101])) == 101

    def test_read_watermark_ignores_trailing_blank_rows(self):
        ledger = MemoryLedger([["100"], ["101"], [None], [""]])
        assert read_watermark(ledger) == 101

    def test_read_watermark_non_numeric_key(self):
        assert read_watermark(MemoryLedger([["TOTAL"]])) is None

    def test_find_watermark_numeric_match(self):
        assert find_watermark(["104", None, "0101", "100"], 101) == 2

    def test_find_watermark_absent(self):
        assert find_watermark(["104", "103"], 101) is None

    def test_find_watermark_none_never_matches(self):
        assert find_watermark(["0", "1"], None) is None


# =============================================================================
# Core behaviour
# =============================================================================


class TestIngestScenarios:
    def test_empty_ledger_appends_everything_oldest_first(self):
        ledger = MemoryLedger()
        source = _source([101, 102, 103])

        result = ingest(source, INGEST_QUERY, ledger)

        assert result.appended_keys == ["101", "102", "103"]
        assert [row[0] for row in ledger.cells] == ["101", "102", "103"]
        assert result.watermark is None
        assert result.watermark_found is False

    def test_only_records_newer_than_watermark(self):
        ledger = ledger_with([99, 100, 101])
        source = _source([100, 101, 102, 103])

        result = ingest(source, INGEST_QUERY, ledger)

        assert result.appended_keys == ["102", "103"]
        assert column(ledger, 1) == [99, 100, 101, "102", "103"]
        assert result.watermark == 101
        assert result.watermark_found is True
        assert result.total_fetched == 4

    def test_nothing_new(self):
        ledger = ledger_with([100, 101])
        result = ingest(_source([100, 101]), INGEST_QUERY, ledger)

        assert result.appended == []
        assert column(ledger, 1) == [100, 101]
        assert ledger.commits == 1

    def test_received_date_written_to_column_e(self):
        ledger = MemoryLedger()
        ingest(_source([7]), INGEST_QUERY, ledger)
        assert ledger.cells[0][4] == BASE_TIME.strftime("%d/%m/%Y")

    def test_custom_date_format(self):
        ledger = MemoryLedger()
        ingest(_source([7]), INGEST_QUERY, ledger, date_format="%Y-%m-%d")
        assert ledger.cells[0][4] == "2026-03-02"

    def test_rows_appended_after_header(self):
        ledger = ledger_with([])
        ingest(_source([1, 2]), INGEST_QUERY, ledger)
        assert [row[0] for row in ledger.cells] == ["Controle E-mail - maria@example.com", "1", "2"]

    def test_watermark_override(self):
        ledger = MemoryLedger()
        result = ingest(_source([1, 2, 3]), INGEST_QUERY, ledger, watermark=2)
        assert result.appended_keys == ["3"]

    def test_repeated_run_is_a_no_op(self):
        ledger = MemoryLedger()
        source = _source([1, 2, 3])
        ingest(source, INGEST_QUERY, ledger)
        second = ingest(source, INGEST_QUERY, ledger)
        assert second.appended == []
        assert len(ledger.cells) == 3

    def test_new_event_after_previous_run(self):
        ledger = MemoryLedger()
        source = _source([1, 2])
        ingest(source, INGEST_QUERY, ledger)
        source.add_event(INGEST_QUERY, new_document(3, minutes=60))

        result = ingest(source, INGEST_QUERY, ledger)

        assert result.appended_keys == ["3"]
        assert [row[0] for row in ledger.cells] == ["1", "2", "3"]


class TestIngestUnparsedSubjects:
    def test_unparsed_events_are_dropped_but_counted(self):
        events = [new_document(100, 0), noise(minutes=1), new_document(101, 2)]
        source = MemoryEventSource({INGEST_QUERY: events})
        ledger = ledger_with([100])

        result = ingest(source, INGEST_QUERY, ledger)

        assert result.appended_keys == ["101"]
        assert result.total_fetched == 3
        assert result.keys_found == 2
        assert result.outcome_counts() == {"known": 1, "new": 1, "unparsed": 1}

    def test_all_unparsed(self):
        source = MemoryEventSource({INGEST_QUERY: [noise(minutes=i) for i in range(3)]})
        ledger = MemoryLedger()

        result = ingest(source, INGEST_QUERY, ledger)

        assert result.appended == []
        assert result.total_fetched == 3
        assert ledger.cells == []

    def test_classification_in_feed_order(self):
        events = [new_document(100, 0), new_document(101, 1), noise(minutes=2), new_document(102, 3)]
        source = MemoryEventSource({INGEST_QUERY: events})

        result = ingest(source, INGEST_QUERY, ledger_with([100]))

        assert [(c.key, c.outcome) for c in result.classified] == [
            ("102", EventOutcome.NEW),
            (None, EventOutcome.UNPARSED),
            ("101", EventOutcome.NEW),
            ("100", EventOutcome.KNOWN),
        ]


# =============================================================================
# Bounded work
# =============================================================================


class TestIngestPagination:
    def test_stops_on_page_containing_watermark(self):
        source = _source(list(range(1, 251)))  # 250 newest-first
        ledger = ledger_with([240])

        result = ingest(source, INGEST_QUERY, ledger, page_size=100, max_events=2000)

        assert source.call_count == 1
        assert result.appended_keys == [str(k) for k in range(241, 251)]

    def test_watermark_on_second_page(self):
        source = _source(list(range(1, 251)))
        ledger = ledger_with([120])

        result = ingest(source, INGEST_QUERY, ledger, page_size=100)

        assert [c.offset for c in source.calls] == [0, 100]
        assert result.pages_fetched == 2
        assert len(result.appended) == 130
        assert result.appended_keys[0] == "121"
        assert result.appended_keys[-1] == "250"

    def test_ceiling_bounds_calls(self):
        source = _source(list(range(1, 1001)))
        ledger = ledger_with([5])  # far beyond the ceiling

        result = ingest(source, INGEST_QUERY, ledger, page_size=100, max_events=250)

        assert [(c.offset, c.limit) for c in source.calls] == [(0, 100), (100, 100), (200, 50)]
        assert result.total_fetched == 250
        assert result.watermark_found is False
        assert len(result.appended) == 250

    def test_exhaustion_stops_paging(self):
        source = _source(list(range(1, 151)))
        ledger = MemoryLedger()

        result = ingest(source, INGEST_QUERY, ledger, page_size=100, max_events=2000)

        # 100 + 50, then one empty page
        assert source.call_count == 3
        assert result.total_fetched == 150
        assert result.appended_keys == [str(k) for k in range(1, 151)]

    def test_empty_feed(self):
        source = MemoryEventSource()
        result = ingest(source, INGEST_QUERY, MemoryLedger())
        assert source.call_count == 1
        assert result.total_fetched == 0
        assert result.appended == []

    def test_page_size_clamped_to_source_cap(self):
        source = _source(list(range(1, 31)), max_page_size=10)
        ingest(source, INGEST_QUERY, MemoryLedger(), page_size=100, max_events=25)
        assert [(c.offset, c.limit) for c in source.calls] == [(0, 10), (10, 10), (20, 5)]


class TestIngestValidation:
    @pytest.mark.parametrize("kwargs", [{"page_size": 0}, {"max_events": 0}, {"page_size": -1}])
    def test_rejects_non_positive_bounds(self, kwargs):
        with pytest.raises(InvalidConfigError):
            ingest(_source([1]), INGEST_QUERY, MemoryLedger(), **kwargs)


# =============================================================================
# Failures
# =============================================================================


class _FailingSource(MemoryEventSource):
    """Serves the first page, then fails."""

    def __init__(self, events, error):
        super().__init__({INGEST_QUERY: events})
        self._error = error

    def _fetch_page(self, query, offset, limit):
        if offset > 0:
            raise self._error
        return super()._fetch_page(query, offset, limit)


class _BrokenLedger(MemoryLedger):
    def __init__(self, fail_after: int):
        super().__init__()
        self._fail_after = fail_after

    def _write_cells(self, row_index, values):
        if row_index > self._fail_after:
            raise OSError("disk full")
        super()._write_cells(row_index, values)


class TestIngestFailures:
    def test_fetch_failure_aborts_with_nothing_appended(self):
        events = new_documents(list(range(1, 11)))
        source = _FailingSource(events, NetworkError("connection reset"))
        ledger = MemoryLedger()

        with pytest.raises(NetworkError) as exc_info:
            ingest(source, INGEST_QUERY, ledger, page_size=5)

        assert ledger.cells == []
        context = exc_info.value.context
        assert context.operation == "ingest"
        assert context.metadata["total_fetched"] == 5
        assert context.metadata["appended"] == 0

    def test_unexpected_source_exception_wrapped(self):
        source = _FailingSource(new_documents(list(range(1, 11))), RuntimeError("boom"))
        with pytest.raises(SourceError, match="boom"):
            ingest(source, INGEST_QUERY, MemoryLedger(), page_size=5)

    def test_ledger_failure_keeps_partial_progress(self):
        ledger = _BrokenLedger(fail_after=2)

        with pytest.raises(LedgerError) as exc_info:
            ingest(_source([1, 2, 3, 4]), INGEST_QUERY, ledger)

        assert [row[0] for row in ledger.cells] == ["1", "2"]
        assert exc_info.value.context.metadata["appended"] == 2


def test_timestamps_keep_feed_order_not_key_order():
    """Keys need not be monotonic; the feed order decides append order."""
    events = [new_document(9, 0), new_document(3, 1), new_document(7, 2)]
    source = MemoryEventSource({INGEST_QUERY: events})
    ledger = MemoryLedger()

    result = ingest(source, INGEST_QUERY, ledger)

    assert result.appended_keys == ["9", "3", "7"]
    assert result.appended[0][1] == events[0].received_at
    assert result.appended[-1][1] - result.appended[0][1] == timedelta(minutes=2)
