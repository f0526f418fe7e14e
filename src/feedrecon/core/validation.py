"""
Ledger owner check.

A ledger is tied to one mailbox owner through its A1 header, e.g.
``Controle E-mail - maria@example.com``. Before any reconciliation the
operations layer compares that owner with the identity the caller runs
as, so one person's feed is never reconciled into another's ledger.
"""

from __future__ import annotations

import re

from feedrecon.core.errors import IdentityMismatchError, LedgerLayoutError

OWNER_HEADER_PATTERN = r"Controle E-mail\s*-\s*(\S+)"
OWNER_HEADER_EXAMPLE = "Controle E-mail - email@example.com"


def parse_owner_header(header: str, pattern: str = OWNER_HEADER_PATTERN) -> str:
    """Return the owner named in *header*.

    Raises:
        LedgerLayoutError: The header does not match the expected format.
    """
    match = re.search(pattern, header or "")
    if match is None:
        raise LedgerLayoutError(
            f'Invalid ledger header. Expected "{OWNER_HEADER_EXAMPLE}", found "{header}"'
        )
    return match.group(1)


def validate_ledger_owner(header: str, identity: str, pattern: str = OWNER_HEADER_PATTERN) -> str:
    """Check that the ledger header names *identity* as owner.

    Comparison is case-insensitive. Returns the owner on success.

    Raises:
        LedgerLayoutError: The header is malformed.
        IdentityMismatchError: The header names someone else.
    """
    owner = parse_owner_header(header, pattern)
    if owner.casefold() != identity.strip().casefold():
        raise IdentityMismatchError(
            f"Ledger owner mismatch: ledger belongs to {owner}, running as {identity}. "
            "Use the ledger associated with your account or switch accounts."
        ).with_context(owner=owner, identity=identity)
    return owner


__all__ = [
    "OWNER_HEADER_PATTERN",
    "parse_owner_header",
    "validate_ledger_owner",
]
