"""In-memory ledger, used by tests and dry runs."""

from __future__ import annotations

from typing import Any

from feedrecon.core.ledger.base import LEDGER_WIDTH, BaseLedger


class MemoryLedger(BaseLedger):
    """Ledger backed by a list of rows.

    Args:
        rows: Initial rows, each a list of cell values starting at column A.
            Shorter rows are padded; ``None`` and ``""`` are blank cells.
        header_rows: Number of leading rows excluded from data.

    Example:
        >>> ledger = MemoryLedger([["100"], ["101", None, None, None, "01/02/2026", "ok"]])
        >>> ledger.last_row().key
        '101'
    """

    def __init__(self, rows: list[list[Any]] | None = None, *, header_rows: int = 0):
        super().__init__(header_rows=header_rows)
        self._cells: list[list[Any]] = [self._pad(list(r)) for r in (rows or [])]
        self.commits = 0

    @property
    def location(self) -> str:
        return ":memory:"

    @property
    def cells(self) -> list[list[Any]]:
        """Raw cell grid (row 1 first)."""
        return self._cells

    def _pad(self, row: list[Any]) -> list[Any]:
        return row + [None] * (LEDGER_WIDTH - len(row))

    def _row_count(self) -> int:
        return len(self._cells)

    def _read_row(self, row_index: int) -> list[Any]:
        return list(self._cells[row_index - 1])

    def _write_cells(self, row_index: int, values: dict[int, Any]) -> None:
        while len(self._cells) < row_index:
            self._cells.append(self._pad([]))
        row = self._cells[row_index - 1]
        for column, value in values.items():
            if column > len(row):
                row.extend([None] * (column - len(row)))
            row[column - 1] = value

    def commit(self) -> None:
        self.commits += 1
