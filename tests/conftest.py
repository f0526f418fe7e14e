"""
Shared pytest fixtures for feedrecon tests.

This module provides:
- Settings and log-context cleanup for test isolation
- Environment scrubbing so a developer's FEEDRECON_* variables never leak in
- Small ready-made feeds and ledgers
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from feedrecon.core.settings import clear_settings_cache
from feedrecon.framework.logging import clear_context
from feedrecon.framework.sources import MemoryEventSource
from tests._support import (
    COMPLETION_QUERY,
    INGEST_QUERY,
    ledger_with,
    new_documents,
    signed_notices,
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Drop FEEDRECON_* variables, run from an empty dir (no .env), reset caches."""
    import os

    for key in list(os.environ):
        if key.startswith("FEEDRECON_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()


@pytest.fixture
def ingest_source() -> MemoryEventSource:
    """Feed of new-document notices 100..104 (104 newest)."""
    return MemoryEventSource({INGEST_QUERY: new_documents([100, 101, 102, 103, 104])})


@pytest.fixture
def completion_source() -> MemoryEventSource:
    """Feed of completion notices for 7, 5 and 3 (3 newest)."""
    return MemoryEventSource({COMPLETION_QUERY: signed_notices([7, 5, 3])})


@pytest.fixture
def ledger_up_to_101():
    return ledger_with([100, 101])
