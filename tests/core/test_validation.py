"""Tests for feedrecon.core.validation (ledger owner check)."""

import pytest

from feedrecon.core.errors import IdentityMismatchError, LedgerLayoutError, ValidationError
from feedrecon.core.validation import parse_owner_header, validate_ledger_owner


class TestParseOwnerHeader:
    def test_valid(self):
        assert parse_owner_header("Controle E-mail - maria@example.com") == "maria@example.com"

    def test_tolerates_spacing(self):
        assert parse_owner_header("Controle E-mail-maria@example.com") == "maria@example.com"

    @pytest.mark.parametrize("header", ["", "Propostas", "Controle - maria@example.com"])
    def test_invalid(self, header):
        with pytest.raises(LedgerLayoutError, match="Invalid ledger header"):
            parse_owner_header(header)


class TestValidateLedgerOwner:
    def test_match(self):
        assert validate_ledger_owner("Controle E-mail - maria@example.com", "maria@example.com") == "maria@example.com"

    def test_case_insensitive(self):
        assert validate_ledger_owner("Controle E-mail - Maria@Example.com", " maria@example.COM ")

    def test_mismatch(self):
        with pytest.raises(IdentityMismatchError) as exc_info:
            validate_ledger_owner("Controle E-mail - maria@example.com", "joao@example.com")

        error = exc_info.value
        assert isinstance(error, ValidationError)
        assert error.retryable is False
        assert error.context.metadata == {"owner": "maria@example.com", "identity": "joao@example.com"}
        assert "maria@example.com" in error.message
