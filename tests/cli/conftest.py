"""Fixtures for CLI tests."""

from __future__ import annotations

import pytest

from feedrecon.framework.logging import configure_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route logs to pytest's stderr at ERROR so command output stays clean."""
    configure_logging(level="ERROR", format="console", force=True)
    yield
