"""scan command — scan every source file under a directory."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markdown import Markdown

from scanlens_core.scanner import Scanner, build_scan_report
from scanlens_core.utils.code import discover_files

console = Console()


@click.command("scan")
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--detailed",
    is_flag=True,
    help="Also run the external linter on every file (slower, smaller batches).",
)
@click.pass_context
def scan_cmd(ctx, path: str, detailed: bool):
    """Scan all JavaScript/TypeScript sources under PATH (default: current directory)."""
    config = ctx.obj["config"]

    files = discover_files(path, config.get("exclude_patterns"))
    if not files:
        console.print("[yellow]No source files found.[/yellow]")
        return

    with console.status(f"Scanning {len(files)} file(s)..."):
        result = Scanner(config).scan_many(files, detailed=detailed)

    console.print(Markdown(build_scan_report(result)))
