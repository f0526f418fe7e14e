"""
Correlation key extraction from message subjects.

Each use site applies exactly one fixed pattern. A subject either yields
one key (the digits captured by the pattern) or nothing; there is no
fuzzy matching and no normalisation beyond the match itself.

Examples:
    >>> NEW_DOCUMENT.extract("HS Consórcios enviou um documento para você assinar - 4821")
    '4821'
    >>> COMPLETED_TRANSFER.extract("O documento Transferência de Cotas - 4821 foi assinado por todos.")
    '4821'
    >>> NEW_DOCUMENT.extract("Lembrete: documento pendente") is None
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from feedrecon.core.errors import InvalidConfigError

# Trailing number after a dash: "... assinar - 4821"
NEW_DOCUMENT_PATTERN = r"-\s*(\d+)$"

# Labelled transfer phrase: "Transferência de Cotas - 4821 foi assinado por todos."
COMPLETED_TRANSFER_PATTERN = r"Transferência de Cotas\s*-\s*(\d+)"


@dataclass(frozen=True)
class KeyExtractor:
    """Compiled single-group pattern that pulls a key out of a subject."""

    name: str
    pattern: str

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise InvalidConfigError(
                f"Invalid key pattern for {self.name!r}: {e}", cause=e
            ) from e
        if compiled.groups != 1:
            raise InvalidConfigError(
                f"Key pattern for {self.name!r} must have exactly one capture group, "
                f"found {compiled.groups}"
            )
        object.__setattr__(self, "_regex", compiled)

    def extract(self, subject: str | None) -> str | None:
        """Return the key captured from *subject*, or ``None``."""
        if not subject:
            return None
        match = self._regex.search(subject)  # type: ignore[attr-defined]
        if match is None:
            return None
        key = match.group(1)
        if not key or not key.isdigit():
            return None
        return key


NEW_DOCUMENT = KeyExtractor("new_document", NEW_DOCUMENT_PATTERN)
COMPLETED_TRANSFER = KeyExtractor("completed_transfer", COMPLETED_TRANSFER_PATTERN)


def parse_numeric_key(value: str | None) -> int | None:
    """Parse the leading digits of *value* as an integer.

    Mirrors how a ledger key cell is read for the watermark: leading
    whitespace is ignored, a leading run of digits is taken, anything else
    gives ``None``.

    >>> parse_numeric_key(" 0042abc")
    42
    >>> parse_numeric_key("abc") is None
    True
    """
    if value is None:
        return None
    match = re.match(r"\s*([+-]?\d+)", value)
    if match is None:
        return None
    return int(match.group(1))


__all__ = [
    "KeyExtractor",
    "NEW_DOCUMENT",
    "COMPLETED_TRANSFER",
    "NEW_DOCUMENT_PATTERN",
    "COMPLETED_TRANSFER_PATTERN",
    "parse_numeric_key",
]
