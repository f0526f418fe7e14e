"""
Event Source protocol for paginated, newest-first feeds.

Every feed the engine reads from (a mailbox export, an HTTP endpoint, an
in-memory list in tests) is exposed through the same three-argument call:

    fetch(query, offset, limit) -> list[Event]

Pages are ordered newest-first. A source keeps no state between calls and
never retries: any failure propagates to the caller as a
:class:`~feedrecon.core.errors.SourceError` (or ``NetworkError`` for
transient transport failures) and aborts the invocation.

Design Principles:
- Protocol over Inheritance: engine code depends on ``EventSource`` only
- Observable: every fetch is logged at DEBUG with offset/limit/count

Usage:
    from feedrecon.framework.sources import MemoryEventSource

    source = MemoryEventSource({"signed": events})
    page = source.fetch("signed", offset=0, limit=50)
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Protocol, runtime_checkable

from feedrecon.core.errors import InvalidConfigError, ReconError, SourceError
from feedrecon.core.models import Event
from feedrecon.framework.logging import get_logger

# Observed platform cap on items per search call
DEFAULT_MAX_PAGE_SIZE = 100

log = get_logger(__name__)


class SourceType(str, Enum):
    """Standard source types."""

    MEMORY = "memory"
    FILE = "file"
    HTTP = "http"


@runtime_checkable
class EventSource(Protocol):
    """
    Protocol for all event sources.

    Implementations must provide:
    - name: Unique identifier for the source
    - max_page_size: Largest ``limit`` honoured per call
    - fetch(): One page of events, newest-first
    """

    @property
    def name(self) -> str:
        ...

    @property
    def max_page_size(self) -> int:
        ...

    def fetch(self, query: str, offset: int, limit: int) -> list[Event]:
        """
        Return up to *limit* events matching *query*, skipping *offset*.

        An empty list means the feed is exhausted at that offset.
        """
        ...


class BaseEventSource:
    """
    Base class for source implementations.

    Provides common functionality:
    - Argument validation and limit clamping
    - Error wrapping with source context
    - Fetch logging

    Subclasses implement :meth:`_fetch_page`.
    """

    def __init__(
        self,
        name: str,
        source_type: SourceType,
        *,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        if max_page_size < 1:
            raise InvalidConfigError(f"max_page_size must be >= 1, got {max_page_size}")
        self._name = name
        self._source_type = source_type
        self._max_page_size = max_page_size

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_type(self) -> SourceType:
        return self._source_type

    @property
    def max_page_size(self) -> int:
        return self._max_page_size

    def fetch(self, query: str, offset: int, limit: int) -> list[Event]:
        """Validate arguments, clamp *limit*, delegate to :meth:`_fetch_page`."""
        if offset < 0:
            raise InvalidConfigError(f"offset must be >= 0, got {offset}")
        if limit < 1:
            raise InvalidConfigError(f"limit must be >= 1, got {limit}")
        limit = min(limit, self._max_page_size)

        try:
            events = self._fetch_page(query, offset, limit)
        except ReconError as e:
            e.with_context(source_name=self._name, query=query)
            raise
        except Exception as e:
            raise self._wrap_error(e, query) from e

        log.debug(
            "source.fetch",
            source=self._name,
            offset=offset,
            limit=limit,
            count=len(events),
        )
        return events

    def _wrap_error(self, error: Exception, query: str) -> ReconError:
        """Wrap an exception in SourceError with context."""
        wrapped = SourceError(str(error) or type(error).__name__, cause=error)
        return wrapped.with_context(source_name=self._name, query=query)

    @abstractmethod
    def _fetch_page(self, query: str, offset: int, limit: int) -> list[Event]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"


__all__ = [
    "DEFAULT_MAX_PAGE_SIZE",
    "SourceType",
    "EventSource",
    "BaseEventSource",
]
