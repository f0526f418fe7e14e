"""
Root Typer application for the feedrecon CLI.

Commands:
    ingest           append new feed records to the ledger
    mark-completed   mark ledger rows whose completion notice arrived
    config show      print the effective settings
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="feedrecon",
    help="feedrecon: reconcile a notification feed against a ledger.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from feedrecon import __version__

        typer.echo(f"feedrecon {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """feedrecon CLI: ingest feed records and mark completed ones."""


# ── Command registration ─────────────────────────────────────────────────

from feedrecon.cli.config import app as config_app  # noqa: E402
from feedrecon.cli.reconcile import ingest_command, mark_completed_command  # noqa: E402

app.command("ingest")(ingest_command)
app.command("mark-completed")(mark_completed_command)
app.add_typer(config_app, name="config", help="Configuration inspection.")


if __name__ == "__main__":
    app()
