"""
Spreadsheet ledger backed by an ``.xlsx`` workbook (openpyxl).

The workbook is loaded once and written back on :meth:`XlsxLedger.commit`.
Used as a context manager the workbook is also saved when the run aborts,
so rows appended or marked before a failure stay persisted.

Usage:
    with XlsxLedger("propostas.xlsx", header_rows=1) as ledger:
        ingest(source, query, ledger, page_size=100, max_events=2000)
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from feedrecon.core.errors import LedgerError
from feedrecon.core.ledger.base import LEDGER_WIDTH, BaseLedger


class XlsxLedger(BaseLedger):
    """Ledger on one worksheet of an xlsx workbook.

    Args:
        path: Workbook path.
        sheet: Worksheet name; the active sheet when omitted.
        header_rows: Number of leading rows excluded from data.
        create: Create an empty workbook when *path* does not exist.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        sheet: str | None = None,
        header_rows: int = 0,
        create: bool = False,
    ):
        super().__init__(header_rows=header_rows)
        self._path = Path(path)
        self._dirty = False

        if self._path.exists():
            try:
                self._workbook = load_workbook(self._path)
            except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
                raise LedgerError(f"Cannot open workbook {self._path}: {e}", cause=e).with_context(
                    ledger=str(self._path)
                ) from e
        elif create:
            self._workbook = Workbook()
            self._dirty = True
        else:
            raise LedgerError(f"Workbook not found: {self._path}").with_context(ledger=str(self._path))

        if sheet is None:
            self._sheet = self._workbook.active
        elif sheet in self._workbook.sheetnames:
            self._sheet = self._workbook[sheet]
        elif create:
            self._sheet = self._workbook.create_sheet(sheet)
            self._dirty = True
        else:
            raise LedgerError(
                f"Worksheet {sheet!r} not found in {self._path}"
            ).with_context(ledger=str(self._path))

    @property
    def location(self) -> str:
        return str(self._path)

    def _row_count(self) -> int:
        # openpyxl reports max_row == 1 for an untouched sheet
        if self._sheet.max_row == 1 and all(
            self._sheet.cell(row=1, column=c).value is None for c in range(1, LEDGER_WIDTH + 1)
        ):
            return 0
        return self._sheet.max_row

    def _read_row(self, row_index: int) -> list[Any]:
        return [self._sheet.cell(row=row_index, column=c).value for c in range(1, LEDGER_WIDTH + 1)]

    def _read_rows(self, start: int, stop: int) -> list[list[Any]]:
        return [
            list(values)
            for values in self._sheet.iter_rows(
                min_row=start, max_row=stop, max_col=LEDGER_WIDTH, values_only=True
            )
        ]

    def _write_cells(self, row_index: int, values: dict[int, Any]) -> None:
        for column, value in values.items():
            self._sheet.cell(row=row_index, column=column, value=value)
        self._dirty = True

    def commit(self) -> None:
        if not self._dirty:
            return
        try:
            self._workbook.save(self._path)
        except OSError as e:
            raise LedgerError(f"Cannot save workbook {self._path}: {e}", cause=e).with_context(
                ledger=str(self._path)
            ) from e
        self._dirty = False

    def close(self) -> None:
        self._workbook.close()
