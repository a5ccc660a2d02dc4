"""export command — write review history as CSV, JSON or a Markdown report."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from scanlens_store.history import build_timeline_report

console = Console()


@click.command("export")
@click.argument("fmt", metavar="FORMAT", type=click.Choice(["csv", "json", "report"]))
@click.option("--output", "-o", "output", default=None, help="Write to this file instead of stdout.")
@click.pass_context
def export_cmd(ctx, fmt: str, output: str | None):
    """Export the review history.

    \b
    csv     one row per review: Date,File,Issues,Complexity,Maintainability,Duplication
    json    the timeline summary with daily trend points
    report  Markdown summary of the timeline and the latest review
    """
    history = ctx.obj["history"]

    if fmt == "csv":
        content = history.export_csv()
    elif fmt == "json":
        content = history.export_json()
    else:
        records = history.reviews()
        content = build_timeline_report(history.summarize(), records[0] if records else None)

    if output is None:
        click.echo(content)
        return

    try:
        Path(output).write_text(content, encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Could not write {output}: {e}")
    console.print(f"[green]Exported {fmt} to {output}[/green]")
