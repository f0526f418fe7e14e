"""
Event Source package.

Provides the paginated feed interface consumed by the reconciliation engine.
"""

from feedrecon.framework.sources.file import FileEventSource, FileFormat
from feedrecon.framework.sources.http import HttpEventSource
from feedrecon.framework.sources.memory import MemoryEventSource
from feedrecon.framework.sources.protocol import (
    DEFAULT_MAX_PAGE_SIZE,
    BaseEventSource,
    EventSource,
    SourceType,
)

__all__ = [
    "DEFAULT_MAX_PAGE_SIZE",
    "SourceType",
    "EventSource",
    "BaseEventSource",
    "MemoryEventSource",
    "FileEventSource",
    "FileFormat",
    "HttpEventSource",
]
