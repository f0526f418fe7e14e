"""
CLI: ``feedrecon ingest`` and ``feedrecon mark-completed``.
"""

from __future__ import annotations

from pathlib import Path

import typer

from feedrecon.cli.utils import close_source, fail, make_source, output_result
from feedrecon.core.errors import ReconError
from feedrecon.core.ledger import open_ledger
from feedrecon.core.settings import get_settings
from feedrecon.framework.logging import configure_logging
from feedrecon.framework.sources.protocol import DEFAULT_MAX_PAGE_SIZE

FEED_HELP = "JSON / JSON Lines export of feed messages"
FEED_URL_HELP = "HTTP search endpoint (GET ?q=&offset=&limit=)"


def ingest_command(
    ledger: Path = typer.Option(..., "--ledger", "-l", help="Ledger file (.xlsx or .db)"),
    feed: Path | None = typer.Option(None, "--feed", "-f", help=FEED_HELP),
    feed_url: str | None = typer.Option(None, "--feed-url", help=FEED_URL_HELP),
    query: str | None = typer.Option(None, "--query", "-q", help="Feed query (default from settings)"),
    page_size: int | None = typer.Option(None, "--page-size", min=1, max=DEFAULT_MAX_PAGE_SIZE),
    max_events: int | None = typer.Option(None, "--max-events", min=1),
    sheet: str | None = typer.Option(None, "--sheet", help="Worksheet name (xlsx)"),
    header_rows: int | None = typer.Option(None, "--header-rows", min=0),
    identity: str | None = typer.Option(None, "--identity", help="Owner identity checked against the ledger header"),
    create: bool = typer.Option(False, "--create", help="Create the ledger if it does not exist"),
    log_level: str | None = typer.Option(None, "--log-level"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Append feed records newer than the ledger's last row."""
    from feedrecon.ops.reconcile import run_ingest

    source = None
    try:
        settings = get_settings()
        configure_logging(level=(log_level or settings.log_level).upper(), format=settings.log_format)
        source = make_source(feed, feed_url, settings)
        with open_ledger(
            ledger,
            header_rows=settings.header_rows if header_rows is None else header_rows,
            sheet=sheet or settings.sheet,
            create=create,
        ) as book:
            result = run_ingest(
                source,
                book,
                settings=settings,
                query=query,
                page_size=page_size,
                max_events=max_events,
                identity=identity,
            )
    except ReconError as e:
        fail(e)
    finally:
        close_source(source)

    output_result(result, as_json=json_out, title="Ingestion")


def mark_completed_command(
    ledger: Path = typer.Option(..., "--ledger", "-l", help="Ledger file (.xlsx or .db)"),
    feed: Path | None = typer.Option(None, "--feed", "-f", help=FEED_HELP),
    feed_url: str | None = typer.Option(None, "--feed-url", help=FEED_URL_HELP),
    query: str | None = typer.Option(None, "--query", "-q", help="Feed query (default from settings)"),
    chunk_size: int | None = typer.Option(None, "--chunk-size", min=1, max=DEFAULT_MAX_PAGE_SIZE),
    max_events: int | None = typer.Option(None, "--max-events", min=1),
    marker: str | None = typer.Option(None, "--marker", help="Completion marker (default: ok)"),
    sheet: str | None = typer.Option(None, "--sheet", help="Worksheet name (xlsx)"),
    header_rows: int | None = typer.Option(None, "--header-rows", min=0),
    identity: str | None = typer.Option(None, "--identity", help="Owner identity checked against the ledger header"),
    log_level: str | None = typer.Option(None, "--log-level"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Mark ledger rows whose documents were signed by all parties."""
    from feedrecon.ops.reconcile import run_mark_completed

    source = None
    try:
        settings = get_settings()
        configure_logging(level=(log_level or settings.log_level).upper(), format=settings.log_format)
        source = make_source(feed, feed_url, settings)
        with open_ledger(
            ledger,
            header_rows=settings.header_rows if header_rows is None else header_rows,
            sheet=sheet or settings.sheet,
        ) as book:
            result = run_mark_completed(
                source,
                book,
                settings=settings,
                query=query,
                chunk_size=chunk_size,
                max_events=max_events,
                marker=marker,
                identity=identity,
            )
    except ReconError as e:
        fail(e)
    finally:
        close_source(source)

    output_result(result, as_json=json_out, title="Completion marking")
