"""
In-memory event source.

Holds a newest-first list of events per query. Used by tests and dry runs,
and records every call so callers can assert on the number of fetches.
"""

from __future__ import annotations

from dataclasses import dataclass

from feedrecon.core.models import Event
from feedrecon.framework.sources.protocol import (
    DEFAULT_MAX_PAGE_SIZE,
    BaseEventSource,
    SourceType,
)


@dataclass(frozen=True, slots=True)
class FetchCall:
    query: str
    offset: int
    limit: int
    returned: int


class MemoryEventSource(BaseEventSource):
    """Serve pages out of per-query event lists.

    Args:
        feeds: Mapping of query text to events. Events are sorted
            newest-first on construction.
        name: Source name.
        max_page_size: Per-call cap.
    """

    def __init__(
        self,
        feeds: dict[str, list[Event]] | None = None,
        *,
        name: str = "memory",
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        super().__init__(name, SourceType.MEMORY, max_page_size=max_page_size)
        self._feeds: dict[str, list[Event]] = {}
        self.calls: list[FetchCall] = []
        for query, events in (feeds or {}).items():
            self.set_feed(query, events)

    def set_feed(self, query: str, events: list[Event]) -> None:
        self._feeds[query] = sorted(events, key=lambda e: e.received_at, reverse=True)

    def add_event(self, query: str, event: Event) -> None:
        """Publish a new event (it becomes the newest if its timestamp is)."""
        self.set_feed(query, [*self._feeds.get(query, []), event])

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def _fetch_page(self, query: str, offset: int, limit: int) -> list[Event]:
        page = self._feeds.get(query, [])[offset:offset + limit]
        self.calls.append(FetchCall(query, offset, limit, len(page)))
        return list(page)
