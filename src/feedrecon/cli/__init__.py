"""
feedrecon command-line interface.

Entry point: ``feedrecon`` (see ``feedrecon.cli.app:app``).
"""

from feedrecon.cli.app import app

__all__ = ["app"]
