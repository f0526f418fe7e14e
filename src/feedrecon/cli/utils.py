"""
CLI utility helpers: output formatting and source/ledger construction.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from feedrecon.core.errors import ReconError, is_retryable
from feedrecon.core.settings import ReconSettings
from feedrecon.framework.sources import EventSource, FileEventSource, HttpEventSource
from feedrecon.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)


# ── Source helper ────────────────────────────────────────────────────────


def make_source(
    feed: Path | None,
    feed_url: str | None,
    settings: ReconSettings,
) -> EventSource:
    """Build the event source selected by ``--feed`` / ``--feed-url``."""
    if (feed is None) == (feed_url is None):
        err_console.print("[bold red]Error:[/bold red] pass exactly one of --feed or --feed-url")
        raise typer.Exit(code=2)
    if feed is not None:
        return FileEventSource(feed.stem or "feed", feed)
    return HttpEventSource("http", feed_url, timeout=settings.http_timeout_seconds)


def close_source(source: EventSource | None) -> None:
    """Close *source* if it holds a resource (the HTTP client)."""
    close = getattr(source, "close", None)
    if close is not None:
        close()


def fail(error: ReconError) -> NoReturn:
    """Print a fatal error and exit with code 1."""
    err_console.print(f"[bold red]Error[/bold red] ({type(error).__name__}): {escape(error.message)}")
    if is_retryable(error):
        err_console.print("[dim]The failure looks transient; running the command again is safe.[/dim]")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal; exit 1 on failure."""
    if as_json:
        console.print_json(json.dumps(result.to_dict(), default=str))
        if not result.success:
            raise typer.Exit(code=1)
        return

    if not result.success:
        err = result.error
        msg = err.message if err else "Unknown error"
        code = err.code if err else "ERROR"
        err_console.print(f"[bold red]Error[/bold red] ({code}): {escape(msg)}")
        if err and err.details:
            progress = {k: v for k, v in err.details.items() if k in ("total_fetched", "appended", "updated")}
            if progress:
                err_console.print(
                    "[dim]Progress before failure (kept in the ledger): "
                    + ", ".join(f"{k}={v}" for k, v in progress.items())
                    + "[/dim]"
                )
        if err and err.retryable:
            err_console.print("[dim]The failure looks transient; running the command again is safe.[/dim]")
        raise typer.Exit(code=1)

    console.print(Panel(escape(result.summary), title=title or None, expand=False))
    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    counts = result.data.outcome_counts() if result.data is not None else {}
    if counts:
        table = Table(title="Event outcomes", show_lines=False)
        table.add_column("Outcome", style="cyan")
        table.add_column("Events", justify="right")
        for outcome, count in counts.items():
            table.add_row(outcome, str(count))
        console.print(table)
    console.print(f"[dim]{result.elapsed_ms:.0f} ms · run {result.metadata.get('run_id', '-')}[/dim]")
