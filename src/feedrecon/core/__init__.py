"""feedrecon core: the event reconciliation engine.

Manifesto:
    A notification feed can only be read newest-first and only says
    things in its subject lines. A ledger must grow oldest-first and must
    never record the same completion twice. The core reconciles the two
    with a watermark cursor for ingestion and a chunked, self-terminating
    scan for completion marking.

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (ReconError, ...)
        models.py          Event, LedgerRow, EventOutcome, results
        extractors.py      Subject -> correlation key patterns

    Layer 2 -- Ledger
        ledger/            Ledger protocol + memory, xlsx, sqlite backends
        validation.py      Ledger owner header check

    Layer 3 -- Engine
        ingestion.py       Watermark cursor (ingest)
        completion.py      Completion scanner (mark_completed)

    Configuration
        settings.py        ReconSettings (pydantic-settings)
"""

from feedrecon.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    IdentityMismatchError,
    InvalidConfigError,
    LedgerError,
    LedgerLayoutError,
    NetworkError,
    ParseError,
    ReconError,
    SourceError,
    SourceUnavailableError,
    TransientError,
    ValidationError,
)
from feedrecon.core.extractors import COMPLETED_TRANSFER, NEW_DOCUMENT, KeyExtractor
from feedrecon.core.models import (
    ClassifiedEvent,
    CompletionResult,
    Event,
    EventOutcome,
    IngestResult,
    LedgerRow,
)

__all__ = [
    # errors
    "ErrorCategory",
    "ErrorContext",
    "ReconError",
    "TransientError",
    "NetworkError",
    "SourceError",
    "SourceUnavailableError",
    "ParseError",
    "ValidationError",
    "LedgerLayoutError",
    "IdentityMismatchError",
    "ConfigError",
    "InvalidConfigError",
    "LedgerError",
    # extractors
    "KeyExtractor",
    "NEW_DOCUMENT",
    "COMPLETED_TRANSFER",
    # models
    "Event",
    "LedgerRow",
    "EventOutcome",
    "ClassifiedEvent",
    "IngestResult",
    "CompletionResult",
]
