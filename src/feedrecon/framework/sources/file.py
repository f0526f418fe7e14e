"""
File source for exported mailbox messages.

Supports:
- JSON (array of objects, or an object with a ``messages`` array)
- JSON Lines (one object per line, ``.jsonl`` / ``.ndjson``)

Each record needs ``subject`` and ``received_at`` (ISO-8601). An optional
``query`` field restricts the record to that feed query; records without
it are served for every query. Records are sorted newest-first on load,
whatever their order in the file.

Usage:
    from feedrecon.framework.sources.file import FileEventSource

    source = FileEventSource("mailbox", "/exports/mailbox.jsonl")
    page = source.fetch(query, offset=0, limit=100)
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from feedrecon.core.errors import InvalidConfigError, ParseError, SourceError
from feedrecon.core.models import Event
from feedrecon.framework.sources.protocol import (
    DEFAULT_MAX_PAGE_SIZE,
    BaseEventSource,
    SourceType,
)


class FileFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    JSONL = "jsonl"


EXTENSION_MAP = {
    ".json": FileFormat.JSON,
    ".jsonl": FileFormat.JSONL,
    ".ndjson": FileFormat.JSONL,
}


def parse_received_at(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    A trailing ``Z`` is accepted as UTC on every supported Python.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"received_at must be an ISO-8601 string, got {value!r}")
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FileEventSource(BaseEventSource):
    """
    Source reading events from a local export file.

    The file is read once, on the first fetch; the source is meant for a
    single invocation over a fixed export.
    """

    def __init__(
        self,
        name: str,
        path: str | Path,
        *,
        format: FileFormat | str | None = None,
        encoding: str = "utf-8",
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        super().__init__(name, SourceType.FILE, max_page_size=max_page_size)
        self._path = Path(path)
        self._encoding = encoding

        if format is None:
            self._format = self._detect_format()
        elif isinstance(format, str):
            try:
                self._format = FileFormat(format.lower())
            except ValueError as e:
                raise InvalidConfigError(f"Unsupported feed file format: {format}", cause=e) from e
        else:
            self._format = format

        self._records: list[tuple[str | None, Event]] | None = None

    @property
    def format(self) -> FileFormat:
        return self._format

    def _detect_format(self) -> FileFormat:
        suffix = self._path.suffix.lower()
        if suffix not in EXTENSION_MAP:
            raise InvalidConfigError(
                f"Cannot detect feed format from extension {suffix!r}; "
                f"expected one of {sorted(EXTENSION_MAP)}"
            )
        return EXTENSION_MAP[suffix]

    def _fetch_page(self, query: str, offset: int, limit: int) -> list[Event]:
        if self._records is None:
            self._records = self._load()
        matching = [event for q, event in self._records if q is None or q == query]
        return matching[offset:offset + limit]

    # -- loading ---------------------------------------------------------------

    def _load(self) -> list[tuple[str | None, Event]]:
        if not self._path.exists():
            raise SourceError(f"Feed file not found: {self._path}")

        text = self._path.read_text(encoding=self._encoding)
        raw_records = self._parse_json(text) if self._format == FileFormat.JSON else self._parse_jsonl(text)

        records = [self._to_event(i, raw) for i, raw in enumerate(raw_records, start=1)]
        records.sort(key=lambda r: r[1].received_at, reverse=True)
        return records

    def _parse_json(self, text: str) -> list[Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in {self._path}: {e}", cause=e) from e
        if isinstance(data, dict):
            data = data.get("messages")
        if not isinstance(data, list):
            raise ParseError(f"Expected a JSON array of messages in {self._path}")
        return data

    def _parse_jsonl(self, text: str) -> list[Any]:
        records = []
        for line_no, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ParseError(f"Invalid JSON on line {line_no} of {self._path}: {e}", cause=e) from e
        return records

    def _to_event(self, position: int, raw: Any) -> tuple[str | None, Event]:
        if not isinstance(raw, dict):
            raise ParseError(f"Record {position} in {self._path} is not an object")
        subject = raw.get("subject")
        if not isinstance(subject, str):
            raise ParseError(f"Record {position} in {self._path} has no subject")
        try:
            received_at = parse_received_at(raw.get("received_at"))
        except ValueError as e:
            raise ParseError(f"Record {position} in {self._path}: {e}", cause=e) from e
        query = raw.get("query")
        return (query if isinstance(query, str) else None), Event(subject=subject, received_at=received_at)
