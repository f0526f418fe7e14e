"""
Tests for feedrecon.core.extractors.

Tests cover:
- New-document and completed-transfer patterns
- Subjects without a key
- Pattern validation at construction
- Leading-digit parsing used for the watermark
"""

import pytest

from feedrecon.core.errors import InvalidConfigError
from feedrecon.core.extractors import (
    COMPLETED_TRANSFER,
    NEW_DOCUMENT,
    KeyExtractor,
    parse_numeric_key,
)


class TestNewDocumentExtractor:
    def test_trailing_number(self):
        assert NEW_DOCUMENT.extract("HS Consórcios enviou um documento para você assinar - 4821") == "4821"

    def test_no_space_around_dash(self):
        assert NEW_DOCUMENT.extract("documento para assinar-77") == "77"

    def test_number_not_at_end(self):
        assert NEW_DOCUMENT.extract("documento - 4821 pendente") is None

    def test_no_dash(self):
        assert NEW_DOCUMENT.extract("Lembrete: documento 4821") is None

    @pytest.mark.parametrize("subject", ["", None])
    def test_empty_subject(self, subject):
        assert NEW_DOCUMENT.extract(subject) is None

    def test_leading_zeros_kept(self):
        assert NEW_DOCUMENT.extract("assinar - 0042") == "0042"


class TestCompletedTransferExtractor:
    def test_labelled_key(self):
        subject = "O documento Transferência de Cotas - 200 foi assinado por todos."
        assert COMPLETED_TRANSFER.extract(subject) == "200"

    def test_other_document_type(self):
        assert COMPLETED_TRANSFER.extract("O documento Contrato - 200 foi assinado por todos.") is None

    def test_new_document_subject_is_not_a_completion(self):
        assert COMPLETED_TRANSFER.extract("enviou um documento para você assinar - 200") is None


class TestKeyExtractorValidation:
    def test_invalid_regex(self):
        with pytest.raises(InvalidConfigError, match="Invalid key pattern"):
            KeyExtractor("broken", r"(\d+")

    def test_requires_exactly_one_group(self):
        with pytest.raises(InvalidConfigError, match="exactly one capture group"):
            KeyExtractor("two", r"(\d+)-(\d+)")

    def test_no_group(self):
        with pytest.raises(InvalidConfigError):
            KeyExtractor("none", r"\d+")

    def test_non_digit_capture_rejected(self):
        extractor = KeyExtractor("letters", r"ref:(\w+)")
        assert extractor.extract("ref:12") == "12"
        assert extractor.extract("ref:ab12") is None

    def test_frozen(self):
        with pytest.raises(AttributeError):
            NEW_DOCUMENT.pattern = "x"  # type: ignore[misc]


class TestParseNumericKey:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("101", 101),
            (" 0042", 42),
            ("42abc", 42),
            ("-7", -7),
            ("abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_values(self, value, expected):
        assert parse_numeric_key(value) == expected
