"""
Structured error types for feedrecon.

Every failure the reconciliation engine can surface is a typed
:class:`ReconError` carrying a category, a retryable flag, structured
context and an optional chained cause. The operations layer turns any
``ReconError`` into a single human-readable message, so the error itself
must carry everything an operator needs.

Manifesto:
    - **Typed hierarchy:** Feed, ledger, config and validation failures
      are distinct types with their own category.
    - **Explicit retry semantics:** Each error knows whether repeating the
      invocation could succeed. The engine never retries on its own.
    - **Progress in context:** When a run aborts mid-way, the engine
      attaches counters (events fetched, rows written) with
      :meth:`ReconError.with_context` before re-raising.
    - **Error chaining:** The underlying exception is kept as ``cause``.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        ReconError                             │
        │  (category, retryable, context, cause)                        │
        ├──────────────────────────────────────────────────────────────┤
        │  TransientError     SourceError            ValidationError   │
        │  (retryable=True)   (SOURCE)               (VALIDATION)      │
        │       │                  │                      │             │
        │  NetworkError       SourceUnavailableError  LedgerLayoutError │
        │                     ParseError              IdentityMismatch  │
        │                                                               │
        │  ConfigError        LedgerError                               │
        │  (CONFIG)           (STORAGE)                                 │
        │       │                                                       │
        │  InvalidConfigError                                           │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NetworkError("feed endpoint unreachable")
    >>> error.retryable
    True
    >>> error.with_context(source_name="mailbox", total_fetched=150).context.source_name
    'mailbox'

Tags:
    error-handling, exception-hierarchy, error-context, feedrecon
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    # Infrastructure (usually transient)
    NETWORK = "NETWORK"
    STORAGE = "STORAGE"

    # Feed/data errors
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"

    # Configuration (never retryable)
    CONFIG = "CONFIG"

    # Internal errors
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a :class:`ReconError`.

    Attributes:
        operation: Engine entry point (``"ingest"`` or ``"mark_completed"``).
        step: Step within the operation (``"fetch"``, ``"append"``, ...).
        run_id: Identifier of the invocation, shared with the log context.
        source_name: Name of the event source.
        query: Feed query text.
        ledger: Ledger location (file path, ``":memory:"``).
        url: URL being accessed by an HTTP source.
        http_status: HTTP status code, if any.
        metadata: Anything else (progress counters, offsets).
    """

    operation: str | None = None
    step: str | None = None
    run_id: str | None = None

    source_name: str | None = None
    query: str | None = None
    ledger: str | None = None

    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "step", "run_id", "source_name", "query",
                    "ledger", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ReconError(Exception):
    """
    Base exception for all feedrecon errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override either per instance.

    Examples:
        >>> error = ReconError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ReconError:
        """
        Add context to this error (fluent API).

        Known :class:`ErrorContext` fields are set directly; anything else
        lands in ``context.metadata``. Fields already set are kept, so an
        outer layer never overwrites what an inner layer recorded.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                if getattr(self.context, key) is None:
                    setattr(self.context, key, value)
            else:
                self.context.metadata.setdefault(key, value)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS
# =============================================================================


class TransientError(ReconError):
    """
    Temporary failure that may succeed if the invocation is repeated.

    The engine does not retry: a transient error still aborts the current
    run. ``retryable`` only tells the operator that running the command
    again is reasonable.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection, DNS or timeout failure while talking to the feed."""

    default_category = ErrorCategory.NETWORK


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(ReconError):
    """The event feed returned something unusable or refused the request."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class SourceUnavailableError(SourceError):
    """The feed answered but is unavailable (5xx, quota exhausted)."""

    default_retryable = True


class ParseError(SourceError):
    """A feed record could not be decoded into an event."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ReconError):
    """The ledger is not in a shape the engine may run against."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class LedgerLayoutError(ValidationError):
    """Ledger header or layout does not match the expected format."""


class IdentityMismatchError(ValidationError):
    """The ledger belongs to a different owner than the caller."""


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(ReconError):
    """Invalid configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """A setting has a value the engine cannot use."""


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class LedgerError(ReconError):
    """Reading from or writing to the ledger failed."""

    default_category = ErrorCategory.STORAGE
    default_retryable = False


# =============================================================================
# HELPERS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Return whether repeating the invocation could succeed."""
    if isinstance(error, ReconError):
        return error.retryable
    return False


__all__ = [
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
    "is_retryable",
]
