"""history command — display recent review records from the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("history")
@click.option("--limit", default=20, show_default=True, help="Maximum number of records to show.")
@click.option("--clear", "clear_history", is_flag=True, help="Delete all recorded history.")
@click.pass_context
def history_cmd(ctx, limit: int, clear_history: bool):
    """Show recent review records, newest first.

    Only records inside the retention window (retention_days) are shown.
    """
    from scanlens_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError(
            "No store configured. Set 'store: json' or 'store: gist' in .scanlens.yml, "
            "or run `scanlens init` to set one up."
        )

    history = ctx.obj["history"]
    if clear_history:
        if not history.clear():
            raise click.ClickException("Could not clear review history.")
        console.print("[green]Review history cleared.[/green]")
        return

    records = history.reviews()[:limit]
    if not records:
        console.print("[yellow]No review records found.[/yellow]")
        return

    table = Table(title="Review History", show_header=True, header_style="bold cyan")
    table.add_column("Reviewed At", no_wrap=True)
    table.add_column("File")
    table.add_column("Issues", justify="right")
    table.add_column("Complexity", justify="right")
    table.add_column("MI", justify="right")
    table.add_column("Dup", justify="right")

    for r in records:
        table.add_row(
            r.timestamp[:16].replace("T", " "),
            r.file_path,
            str(r.issue_count),
            str(r.metrics.complexity),
            str(r.metrics.maintainability),
            f"{r.metrics.duplication}%",
        )

    console.print(table)
