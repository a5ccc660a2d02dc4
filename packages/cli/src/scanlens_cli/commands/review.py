"""review command — scan a single file and record the result."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from scanlens_core.fixes import apply_fixes
from scanlens_core.metrics import quality_report
from scanlens_core.models import ScanResult
from scanlens_core.scanner import Scanner

console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "blue"}


def print_findings(result: ScanResult) -> None:
    if not result.findings:
        console.print(f"[green]No issues found in {result.file}.[/green]")
        return

    table = Table(title=f"Findings — {result.file}", show_header=True, header_style="bold cyan")
    table.add_column("Line", justify="right", width=6)
    table.add_column("Col", justify="right", width=5)
    table.add_column("Severity", width=9)
    table.add_column("Rule", style="bold")
    table.add_column("Message")

    for f in result.findings:
        style = _SEVERITY_STYLE.get(f.severity, "white")
        table.add_row(str(f.line), str(f.column), f"[{style}]{f.severity}[/{style}]", f.rule, f.message)

    console.print(table)


@click.command("review")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--no-record", is_flag=True, help="Do not add this review to the history.")
@click.option(
    "--on-save",
    is_flag=True,
    help="Editor/save-hook entry point: does nothing when auto_analyze_on_save is off.",
)
@click.option("--fix", is_flag=True, help="Apply the available quick fixes to the file before reporting.")
@click.pass_context
def review_cmd(ctx, file: str, no_record: bool, on_save: bool, fix: bool):
    """Scan FILE with the rule catalog and show its quality report.

    The result is added to the review history unless --no-record is given
    or the file is excluded by configuration.
    """
    config = ctx.obj["config"]
    if on_save and not config.get("auto_analyze_on_save", True):
        return

    path = Path(file)
    try:
        text = path.read_text(encoding="utf-8")
        size = path.stat().st_size
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {file}: {e}")

    scanner = Scanner(config)
    result = scanner.scan_file(text, file, size_bytes=size)

    if result.excluded:
        console.print(f"[dim]{file} is excluded by configuration — nothing to review.[/dim]")
        return

    if fix and not result.oversized:
        fixed_text, applied = apply_fixes(text, result.findings)
        if applied:
            path.write_text(fixed_text, encoding="utf-8")
            console.print(f"[green]Applied {applied} quick fix(es) to {file}.[/green]")
            result = scanner.scan_file(fixed_text, file)
        else:
            console.print("[dim]No quick fixes available.[/dim]")

    print_findings(result)
    if not result.oversized:
        console.print(Markdown(quality_report(result.metrics, title=f"Quality Report — {path.name}")))

    if not no_record:
        ctx.obj["history"].record(result)
