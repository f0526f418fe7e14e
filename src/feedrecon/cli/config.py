"""
CLI: ``feedrecon config``, configuration inspection.
"""

from __future__ import annotations

import typer

from feedrecon.cli.utils import console, fail
from feedrecon.core.errors import ReconError

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective configuration."""
    from feedrecon.core.settings import get_settings

    try:
        settings = get_settings()
    except ReconError as e:
        fail(e)

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in sorted(settings.model_dump().items()):
            if value is not None:
                console.print(f"FEEDRECON_{key.upper()}={value}", markup=False, highlight=False)
        return

    if format != "table":
        console.print(f"[red]Unknown format:[/red] {format}")
        raise typer.Exit(code=2)

    from rich.table import Table

    table = Table(title="feedrecon settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, "[dim]unset[/dim]" if value is None else str(value))
    console.print(table)
