"""
Ledger accessors.

``open_ledger()`` picks a backend from the path:

    propostas.xlsx   -> XlsxLedger (openpyxl)
    ledger.db        -> SqliteLedger
    :memory:         -> MemoryLedger
"""

from __future__ import annotations

from pathlib import Path

from feedrecon.core.errors import InvalidConfigError
from feedrecon.core.ledger.base import (
    KEY_COLUMN,
    LEDGER_WIDTH,
    RECEIVED_COLUMN,
    STATUS_COLUMN,
    BaseLedger,
    Ledger,
    normalize_key,
    normalize_status,
)
from feedrecon.core.ledger.memory import MemoryLedger
from feedrecon.core.ledger.sqlite import SqliteLedger
from feedrecon.core.ledger.xlsx import XlsxLedger

XLSX_SUFFIXES = {".xlsx", ".xlsm"}
SQLITE_SUFFIXES = {".db", ".sqlite", ".sqlite3"}


def open_ledger(
    path: str | Path,
    *,
    header_rows: int = 0,
    sheet: str | None = None,
    create: bool = False,
) -> BaseLedger:
    """Open the ledger at *path* with the backend matching its extension."""
    if str(path) == ":memory:":
        return MemoryLedger(header_rows=header_rows)

    suffix = Path(path).suffix.lower()
    if suffix in XLSX_SUFFIXES:
        return XlsxLedger(path, sheet=sheet, header_rows=header_rows, create=create)
    if suffix in SQLITE_SUFFIXES:
        return SqliteLedger(path, header_rows=header_rows)
    raise InvalidConfigError(
        f"Unsupported ledger type {suffix or str(path)!r}; "
        f"expected one of {sorted(XLSX_SUFFIXES | SQLITE_SUFFIXES)} or ':memory:'"
    )


__all__ = [
    "KEY_COLUMN",
    "RECEIVED_COLUMN",
    "STATUS_COLUMN",
    "LEDGER_WIDTH",
    "Ledger",
    "BaseLedger",
    "MemoryLedger",
    "SqliteLedger",
    "XlsxLedger",
    "normalize_key",
    "normalize_status",
    "open_ledger",
]
