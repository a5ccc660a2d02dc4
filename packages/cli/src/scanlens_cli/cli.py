"""CLI entry point for scanlens.

Commands:
  review    — scan one file, show findings and its quality report
  scan      — scan every source file under a directory
  history   — display recent review records from the configured store
  timeline  — daily issue and quality trend across recorded reviews
  export    — write history as CSV, JSON or a Markdown report
  init      — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from scanlens_cli.commands.export import export_cmd
from scanlens_cli.commands.history import history_cmd
from scanlens_cli.commands.init import init_cmd
from scanlens_cli.commands.review import review_cmd
from scanlens_cli.commands.scan import scan_cmd
from scanlens_cli.commands.timeline import timeline_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .scanlens.yml settings.

    Store selection hierarchy:
      store: json  → JsonFileStore (store_path, default .scanlens/review-history.json)
      store: gist  → GistStore     (requires gist_id and github_token)
      store: none  → NoOpStore     (history switched off)

    This factory lives in cli.py so neither scanlens_core nor scanlens_store
    know about the CLI config format.
    """
    from scanlens_store.noop import NoOpStore

    store_type = config.get("store", "json")

    if store_type == "gist":
        from scanlens_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print("[yellow]GistStore requires gist_id and a GitHub token. Falling back to no store.[/yellow]")
            return NoOpStore()
        return GistStore(gist_id=gist_id, token=token)

    if store_type == "json":
        from scanlens_store.jsonfile import JsonFileStore

        return JsonFileStore(path=config.get("store_path", ".scanlens/review-history.json"))

    return NoOpStore()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=verbose)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("scanlens"),
    prog_name="scanlens",
)
@click.option(
    "--config",
    "config_path",
    default=".scanlens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="SCANLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Static code review and quality metrics for JavaScript and TypeScript."""
    from scanlens_core.config import load_config
    from scanlens_cli.auth import resolve_github_token
    from scanlens_store.history import HistoryAggregator

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Only the gist store needs a token; skip the gh round-trip otherwise.
    if config.get("store") == "gist":
        token = resolve_github_token()
        if token:
            config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["history"] = HistoryAggregator(store, retention_days=config["retention_days"])
    ctx.call_on_close(store.close)


main.add_command(review_cmd)
main.add_command(scan_cmd)
main.add_command(history_cmd)
main.add_command(timeline_cmd)
main.add_command(export_cmd)
main.add_command(init_cmd)
