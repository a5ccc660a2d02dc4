"""timeline command — daily issue and quality trend across recorded reviews."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


@click.command("timeline")
@click.pass_context
def timeline_cmd(ctx):
    """Summarize recorded reviews and show the daily quality trend."""
    summary = ctx.obj["history"].summarize()
    if not summary.total_reviews:
        console.print("[yellow]No review records found.[/yellow]")
        return

    style = _score_style(summary.average_quality_score)
    console.print("\n[bold]Code quality timeline[/bold]")
    console.print(f"  Total reviews:  {summary.total_reviews}")
    console.print(f"  Total issues:   {summary.total_issues}")
    console.print(f"  Average score:  [{style}]{summary.average_quality_score}/100[/{style}]")

    table = Table(title="Daily Trend", show_header=True, header_style="bold cyan")
    table.add_column("Date", width=12)
    table.add_column("Issues", justify="right")
    table.add_column("Quality Score", justify="right")
    for point in summary.trend_data:
        style = _score_style(point.quality_score)
        table.add_row(point.date, str(point.issues), f"[{style}]{point.quality_score}[/{style}]")

    console.print(table)
