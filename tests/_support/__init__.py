"""
Test support utilities for feedrecon tests.

Builders for feed events and ledgers that don't fit as pytest fixtures
but are used across multiple test files.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from feedrecon.core.ledger import MemoryLedger
from feedrecon.core.models import Event

BASE_TIME = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

INGEST_QUERY = "new-documents"
COMPLETION_QUERY = "signed-by-all"
HEADER = "Controle E-mail - maria@example.com"


def new_document(key: int | str, minutes: int = 0) -> Event:
    """A new-document notice received *minutes* after ``BASE_TIME``."""
    return Event(
        subject=f"HS Consórcios enviou um documento para você assinar - {key}",
        received_at=BASE_TIME + timedelta(minutes=minutes),
    )


def signed(key: int | str, minutes: int = 0) -> Event:
    """A completion notice received *minutes* after ``BASE_TIME``."""
    return Event(
        subject=f"O documento Transferência de Cotas - {key} foi assinado por todos.",
        received_at=BASE_TIME + timedelta(minutes=minutes),
    )


def noise(subject: str = "Lembrete: documento pendente", minutes: int = 0) -> Event:
    """An event whose subject carries no key."""
    return Event(subject=subject, received_at=BASE_TIME + timedelta(minutes=minutes))


def new_documents(keys: list[int]) -> list[Event]:
    """Notices for *keys*, received in the order given (later keys are newer)."""
    return [new_document(key, minutes=i) for i, key in enumerate(keys)]


def signed_notices(keys: list[int]) -> list[Event]:
    """Completion notices for *keys*, received in the order given."""
    return [signed(key, minutes=i) for i, key in enumerate(keys)]


def ledger_with(keys: list[int | str], statuses: dict[int | str, str] | None = None, *, header: bool = True) -> MemoryLedger:
    """Memory ledger with one row per key (column A) and optional statuses (column F)."""
    statuses = statuses or {}
    rows: list[list] = [[HEADER]] if header else []
    for key in keys:
        rows.append([key, None, None, None, "01/03/2026", statuses.get(key)])
    return MemoryLedger(rows, header_rows=1 if header else 0)


def column(ledger: MemoryLedger, index: int) -> list:
    """Data values of one 1-based column, header rows excluded."""
    return [row[index - 1] for row in ledger.cells[ledger.header_rows:]]
