"""
Value objects shared by the reconciliation engine.

Events and pages are ephemeral: they live for one fetch step. Ledger rows
are snapshots of the durable table taken once per invocation. Results are
what the engine hands back to the operations layer.

Stdlib dataclasses only, no pydantic.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class Event:
    """One feed record.

    Attributes:
        subject: Message subject, the only structured payload.
        received_at: When the message was received.
    """

    subject: str
    received_at: datetime


@dataclass(frozen=True, slots=True)
class LedgerRow:
    """Snapshot of one ledger row.

    Attributes:
        row_index: 1-based position in the table.
        key: Column A normalised to text, ``None`` when empty or not text-like.
        status: Column F normalised to text, ``None`` when empty.
    """

    row_index: int
    key: str | None
    status: str | None = None


class EventOutcome(str, Enum):
    """Tagged outcome of one event after classification."""

    # Ingestion
    NEW = "new"
    KNOWN = "known"

    # Completion marking
    MATCHED = "matched"
    ALREADY_COMPLETE = "already_complete"
    ORPHAN = "orphan"

    # Both
    UNPARSED = "unparsed"


@dataclass(frozen=True, slots=True)
class ClassifiedEvent:
    """An event together with its extracted key and outcome."""

    event: Event
    key: str | None
    outcome: EventOutcome
    row_index: int | None = None


def _outcome_counts(classified: list[ClassifiedEvent]) -> dict[str, int]:
    counts = Counter(c.outcome.value for c in classified)
    return dict(sorted(counts.items()))


@dataclass
class IngestResult:
    """Outcome of one ingestion run.

    Attributes:
        appended: ``(key, received_at)`` pairs in the order they were
            appended (oldest first).
        total_fetched: Events returned by the feed, parsed or not.
        pages_fetched: Number of feed calls issued.
        watermark: Numeric key of the last ledger row, ``None`` if absent.
        watermark_found: Whether the watermark was seen in the feed.
        classified: Every fetched event with its outcome, feed order.
    """

    appended: list[tuple[str, datetime]] = field(default_factory=list)
    total_fetched: int = 0
    pages_fetched: int = 0
    watermark: int | None = None
    watermark_found: bool = False
    classified: list[ClassifiedEvent] = field(default_factory=list)

    @property
    def appended_keys(self) -> list[str]:
        return [key for key, _ in self.appended]

    @property
    def keys_found(self) -> int:
        """Events that yielded a correlation key."""
        return sum(1 for c in self.classified if c.key is not None)

    def outcome_counts(self) -> dict[str, int]:
        return _outcome_counts(self.classified)

    def to_dict(self) -> dict[str, object]:
        return {
            "appended": [
                {"key": key, "received_at": received_at.isoformat()}
                for key, received_at in self.appended
            ],
            "total_fetched": self.total_fetched,
            "pages_fetched": self.pages_fetched,
            "watermark": self.watermark,
            "watermark_found": self.watermark_found,
            "keys_found": self.keys_found,
            "outcomes": self.outcome_counts(),
        }


@dataclass
class CompletionResult:
    """Outcome of one completion-marking run.

    Attributes:
        updated_keys: Keys whose row was newly marked, in processing order.
        updated_rows: Row indexes matching ``updated_keys``.
        total_fetched: Events returned by the feed, parsed or not.
        chunks_processed: Non-empty chunks that were processed.
        fetch_calls: Number of feed calls issued (including a final empty one).
        early_terminated: Whether the scan stopped on a fully reconciled chunk.
        ledger_rows: Data rows in the ledger snapshot.
        classified: Every fetched event with its outcome, feed order.
    """

    updated_keys: list[str] = field(default_factory=list)
    updated_rows: list[int] = field(default_factory=list)
    total_fetched: int = 0
    chunks_processed: int = 0
    fetch_calls: int = 0
    early_terminated: bool = False
    ledger_rows: int = 0
    classified: list[ClassifiedEvent] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated_keys)

    def outcome_counts(self) -> dict[str, int]:
        return _outcome_counts(self.classified)

    def to_dict(self) -> dict[str, object]:
        return {
            "updated_keys": list(self.updated_keys),
            "updated_rows": list(self.updated_rows),
            "total_fetched": self.total_fetched,
            "chunks_processed": self.chunks_processed,
            "fetch_calls": self.fetch_calls,
            "early_terminated": self.early_terminated,
            "ledger_rows": self.ledger_rows,
            "outcomes": self.outcome_counts(),
        }


__all__ = [
    "Event",
    "LedgerRow",
    "EventOutcome",
    "ClassifiedEvent",
    "IngestResult",
    "CompletionResult",
]
