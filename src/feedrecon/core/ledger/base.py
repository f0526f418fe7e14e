"""
Ledger accessor protocol and shared base class.

The ledger is a plain table addressed by 1-based row index and 1-based
column. The engine only touches three columns:

    A  correlation key
    E  received date (written by ingestion)
    F  status (written by completion marking)

Backends implement a handful of raw cell primitives; :class:`BaseLedger`
builds the engine-facing operations on top of them: the true last keyed
row (trailing blank rows ignored), a normalised row snapshot, appends and
single-cell status updates.

Row 1 is ordinary data unless ``header_rows`` says otherwise.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol, runtime_checkable

from feedrecon.core.errors import InvalidConfigError, LedgerError, ReconError
from feedrecon.core.models import LedgerRow

KEY_COLUMN = 1
RECEIVED_COLUMN = 5
STATUS_COLUMN = 6
LEDGER_WIDTH = 6


def normalize_key(value: Any) -> str | None:
    """
    Normalise a key cell to text.

    Integers (and integral floats, as spreadsheets store numbers) become
    their decimal text. Strings are stripped. Empty cells, booleans and
    anything else become ``None`` and never match an extracted key.

    >>> normalize_key(4821.0)
    '4821'
    >>> normalize_key(" 4821 ")
    '4821'
    >>> normalize_key(True) is None
    True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return None


def normalize_status(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@runtime_checkable
class Ledger(Protocol):
    """What the reconciliation engine needs from a ledger."""

    @property
    def location(self) -> str:
        ...

    def header_value(self) -> str:
        ...

    def last_row(self) -> LedgerRow | None:
        ...

    def rows(self) -> list[LedgerRow]:
        ...

    def append_row(self, key: str, received: str | None = None) -> int:
        ...

    def set_status(self, row_index: int, status: str) -> None:
        ...

    def commit(self) -> None:
        ...


class BaseLedger:
    """
    Base class for ledger backends.

    Subclasses implement:
    - ``_row_count()``: highest row index holding any cell
    - ``_read_row(row_index)``: the first ``LEDGER_WIDTH`` cells of a row
    - ``_write_cells(row_index, {column: value})``
    - ``commit()`` / ``close()``

    Backend exceptions are wrapped in :class:`LedgerError`.
    """

    def __init__(self, *, header_rows: int = 0):
        if header_rows < 0:
            raise InvalidConfigError(f"header_rows must be >= 0, got {header_rows}")
        self._header_rows = header_rows

    @property
    def header_rows(self) -> int:
        return self._header_rows

    @property
    @abstractmethod
    def location(self) -> str:
        raise NotImplementedError

    # -- raw primitives ----------------------------------------------------------

    @abstractmethod
    def _row_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def _read_row(self, row_index: int) -> list[Any]:
        raise NotImplementedError

    @abstractmethod
    def _write_cells(self, row_index: int, values: dict[int, Any]) -> None:
        raise NotImplementedError

    def _read_rows(self, start: int, stop: int) -> list[list[Any]]:
        """Rows ``start..stop`` inclusive."""
        return [self._read_row(r) for r in range(start, stop + 1)]

    def _last_keyed_row(self) -> int:
        """Last row whose key cell is not blank; 0 when there is none."""
        for row_index in range(self._row_count(), 0, -1):
            if not _is_blank(self._read_row(row_index)[KEY_COLUMN - 1]):
                return row_index
        return 0

    def _last_populated_row(self) -> int:
        """Last row with any non-blank cell; 0 when the table is empty."""
        for row_index in range(self._row_count(), 0, -1):
            if any(not _is_blank(v) for v in self._read_row(row_index)):
                return row_index
        return 0

    # -- engine operations -------------------------------------------------------

    def header_value(self) -> str:
        """Text of cell A1 (owner header), empty when blank."""
        with self._wrapped("read header"):
            if self._row_count() < 1:
                return ""
            value = self._read_row(1)[KEY_COLUMN - 1]
        return "" if value is None else str(value)

    def last_row_index(self) -> int:
        """True last data row in the key column, 0 when there are no data rows."""
        with self._wrapped("find last row"):
            last = self._last_keyed_row()
        return last if last > self._header_rows else 0

    def last_row(self) -> LedgerRow | None:
        """Snapshot of the last keyed data row, or ``None``."""
        last = self.last_row_index()
        if last == 0:
            return None
        with self._wrapped("read last row"):
            cells = self._read_row(last)
        return self._to_row(last, cells)

    def rows(self) -> list[LedgerRow]:
        """Snapshot of every data row up to the last keyed row, in table order."""
        last = self.last_row_index()
        first = self._header_rows + 1
        if last < first:
            return []
        with self._wrapped("read rows"):
            cells = self._read_rows(first, last)
        return [self._to_row(first + i, row) for i, row in enumerate(cells)]

    def append_row(self, key: str, received: str | None = None) -> int:
        """Write a new row after the last populated one; return its index."""
        with self._wrapped("append row"):
            row_index = max(self._last_populated_row(), self._header_rows) + 1
            values: dict[int, Any] = {KEY_COLUMN: key}
            if received is not None:
                values[RECEIVED_COLUMN] = received
            self._write_cells(row_index, values)
        return row_index

    def set_status(self, row_index: int, status: str) -> None:
        """Overwrite the status cell of one row."""
        if row_index <= self._header_rows:
            raise LedgerError(
                f"Refusing to write status into header row {row_index}"
            ).with_context(ledger=self.location)
        with self._wrapped("set status"):
            self._write_cells(row_index, {STATUS_COLUMN: status})

    @abstractmethod
    def commit(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self):
        return self

    def __exit__(self, *exc: object) -> None:
        # Commit even after a failure: partial progress stays persisted
        try:
            self.commit()
        finally:
            self.close()

    # -- helpers -----------------------------------------------------------------

    def _to_row(self, row_index: int, cells: list[Any]) -> LedgerRow:
        padded = list(cells) + [None] * (LEDGER_WIDTH - len(cells))
        return LedgerRow(
            row_index=row_index,
            key=normalize_key(padded[KEY_COLUMN - 1]),
            status=normalize_status(padded[STATUS_COLUMN - 1]),
        )

    def _wrapped(self, action: str) -> _LedgerErrorScope:
        return _LedgerErrorScope(self.location, action)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"


class _LedgerErrorScope:
    """Context manager turning backend exceptions into LedgerError."""

    def __init__(self, location: str, action: str):
        self._location = location
        self._action = action

    def __enter__(self) -> None:
        return None

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None or isinstance(exc, ReconError) or not isinstance(exc, Exception):
            return False
        raise LedgerError(
            f"Ledger failed to {self._action}: {exc}", cause=exc
        ).with_context(ledger=self._location) from exc


__all__ = [
    "KEY_COLUMN",
    "RECEIVED_COLUMN",
    "STATUS_COLUMN",
    "LEDGER_WIDTH",
    "Ledger",
    "BaseLedger",
    "normalize_key",
    "normalize_status",
]
