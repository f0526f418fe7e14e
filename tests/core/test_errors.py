"""
Tests for feedrecon.core.errors.

Tests cover:
- Default categories and retry flags per error type
- Fluent context (known fields vs metadata, no overwrite)
- Serialisation and cause chaining
- is_retryable helper
"""

import pytest

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
    is_retryable,
)


class TestErrorDefaults:
    @pytest.mark.parametrize(
        "error_cls, category, retryable",
        [
            (ReconError, ErrorCategory.INTERNAL, False),
            (NetworkError, ErrorCategory.NETWORK, True),
            (SourceError, ErrorCategory.SOURCE, False),
            (SourceUnavailableError, ErrorCategory.SOURCE, True),
            (ParseError, ErrorCategory.PARSE, False),
            (LedgerLayoutError, ErrorCategory.VALIDATION, False),
            (IdentityMismatchError, ErrorCategory.VALIDATION, False),
            (InvalidConfigError, ErrorCategory.CONFIG, False),
            (LedgerError, ErrorCategory.STORAGE, False),
        ],
    )
    def test_category_and_retryable(self, error_cls, category, retryable):
        error = error_cls("x")
        assert error.category is category
        assert error.retryable is retryable

    def test_overrides(self):
        error = SourceError("x", retryable=True, category=ErrorCategory.NETWORK)
        assert error.retryable is True
        assert error.category is ErrorCategory.NETWORK

    def test_invalid_config_is_config_error(self):
        assert isinstance(InvalidConfigError("x"), ConfigError)


class TestWithContext:
    def test_known_fields_and_metadata(self):
        error = SourceError("x").with_context(source_name="mailbox", offset=100)
        assert error.context.source_name == "mailbox"
        assert error.context.metadata == {"offset": 100}

    def test_inner_context_is_kept(self):
        error = NetworkError("x").with_context(query="inner", total_fetched=5)
        error.with_context(query="outer", total_fetched=99)
        assert error.context.query == "inner"
        assert error.context.metadata["total_fetched"] == 5

    def test_returns_self(self):
        error = LedgerError("x")
        assert error.with_context(ledger="l.xlsx") is error


class TestSerialisation:
    def test_to_dict(self):
        cause = OSError("disk full")
        error = LedgerError("write failed", cause=cause).with_context(ledger="l.db", appended=2)

        d = error.to_dict()

        assert d == {
            "error_type": "LedgerError",
            "message": "write failed",
            "category": "STORAGE",
            "retryable": False,
            "context": {"ledger": "l.db", "appended": 2},
            "cause": "disk full",
        }
        assert error.__cause__ is cause

    def test_empty_context_omitted(self):
        assert "context" not in ReconError("x").to_dict()

    def test_context_to_dict_skips_none(self):
        assert ErrorContext(operation="ingest").to_dict() == {"operation": "ingest"}

    def test_repr(self):
        assert repr(ParseError("bad")) == "ParseError('bad', category=PARSE)"


class TestHelpers:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (NetworkError("x"), True),
            (ParseError("x"), False),
            (ConnectionError("x"), False),
        ],
    )
    def test_is_retryable(self, error, expected):
        assert is_retryable(error) is expected
