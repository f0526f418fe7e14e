"""SQLite ledger: one ``ledger`` table with a column per spreadsheet column.

Each write is committed immediately, so partial progress survives an
aborted run without relying on :meth:`SqliteLedger.commit`.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from feedrecon.core.errors import LedgerError
from feedrecon.core.ledger.base import KEY_COLUMN, LEDGER_WIDTH, BaseLedger

_COLUMNS = ("a", "b", "c", "d", "e", "f")

SCHEMA = """
CREATE TABLE IF NOT EXISTS ledger (
    row_index INTEGER PRIMARY KEY,
    a, b, c, d, e, f
)
"""


class SqliteLedger(BaseLedger):
    """Ledger stored in a SQLite database.

    Args:
        path: Database file, or ``":memory:"``.
        header_rows: Number of leading rows excluded from data.
    """

    def __init__(self, path: str | Path = ":memory:", *, header_rows: int = 0):
        super().__init__(header_rows=header_rows)
        self._path = str(path)
        try:
            self._conn = sqlite3.connect(self._path)
            self._conn.execute(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise LedgerError(f"Cannot open ledger database {self._path}: {e}", cause=e).with_context(
                ledger=self._path
            ) from e

    @property
    def location(self) -> str:
        return self._path

    def _row_count(self) -> int:
        row = self._conn.execute("SELECT MAX(row_index) FROM ledger").fetchone()
        return row[0] or 0

    def _read_row(self, row_index: int) -> list[Any]:
        row = self._conn.execute(
            "SELECT a, b, c, d, e, f FROM ledger WHERE row_index = ?", (row_index,)
        ).fetchone()
        return list(row) if row else [None] * LEDGER_WIDTH

    def _read_rows(self, start: int, stop: int) -> list[list[Any]]:
        stored = {
            r[0]: list(r[1:])
            for r in self._conn.execute(
                "SELECT row_index, a, b, c, d, e, f FROM ledger "
                "WHERE row_index BETWEEN ? AND ? ORDER BY row_index",
                (start, stop),
            ).fetchall()
        }
        return [stored.get(i, [None] * LEDGER_WIDTH) for i in range(start, stop + 1)]

    def _last_keyed_row(self) -> int:
        key_column = _COLUMNS[KEY_COLUMN - 1]
        row = self._conn.execute(
            f"SELECT MAX(row_index) FROM ledger "
            f"WHERE {key_column} IS NOT NULL AND TRIM(CAST({key_column} AS TEXT)) != ''"
        ).fetchone()
        return row[0] or 0

    def _write_cells(self, row_index: int, values: dict[int, Any]) -> None:
        self._conn.execute("INSERT OR IGNORE INTO ledger (row_index) VALUES (?)", (row_index,))
        for column, value in values.items():
            self._conn.execute(
                f"UPDATE ledger SET {_COLUMNS[column - 1]} = ? WHERE row_index = ?",
                (value, row_index),
            )
        self._conn.commit()

    def insert_rows(self, rows: list[list[Any]]) -> None:
        """Bulk-load rows starting at row 1 (fixtures and imports)."""
        start = self._row_count() + 1
        for offset, row in enumerate(rows):
            padded = list(row) + [None] * (LEDGER_WIDTH - len(row))
            self._conn.execute(
                "INSERT INTO ledger (row_index, a, b, c, d, e, f) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (start + offset, *padded[:LEDGER_WIDTH]),
            )
        self._conn.commit()

    def commit(self) -> None:
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
