"""init command — interactive setup wizard.

Why an init wizard:
- Writes .scanlens.yml once so every developer who clones the repo scans
  with the same rules, exclusions and size limit.
- Creates the team Gist automatically so nobody needs to know the GitHub
  API to set up shared history.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path

import click
import yaml
from rich.console import Console

logger = logging.getLogger(__name__)

console = Console()

_GIST_FILENAME = "scanlens_history.json"


@click.command("init")
@click.option("--description", default=None, help="Description for a newly created team Gist.")
@click.pass_context
def init_cmd(ctx, description: str | None):
    """Set up scanlens for this project.

    Creates .scanlens.yml and, for the gist store, a private GitHub Gist
    that holds the shared review history.
    """
    config_path = ctx.parent.params.get("config_path", ".scanlens.yml") if ctx.parent else ".scanlens.yml"
    console.print("\n[bold cyan]scanlens init[/bold cyan] — setup wizard\n")

    # --- Rule categories ---
    rules = {
        category: click.confirm(f"Enable {category} rules?", default=True)
        for category in ("security", "performance", "style")
    }
    max_file_size = click.prompt("Maximum file size to analyse (KB)", type=click.IntRange(min=1), default=500)

    # --- Choose store backend ---
    console.print("\nReview history store:")
    console.print("  [bold]json[/bold]  — local JSON file in .scanlens/ (default)")
    console.print("  [bold]gist[/bold]  — shared GitHub Gist, zero infrastructure (recommended for teams)")
    console.print("  [bold]none[/bold]  — no history")
    store_type = click.prompt(
        "Store backend",
        type=click.Choice(["json", "gist", "none"]),
        default="json",
    )

    config: dict = {"rules": rules, "max_file_size": max_file_size, "store": store_type}

    if store_type == "json":
        store_path = click.prompt("History file path", default=".scanlens/review-history.json")
        if store_path != ".scanlens/review-history.json":
            config["store_path"] = store_path
        console.print(f"[green]JSON store configured at {store_path}[/green]")

    elif store_type == "gist":
        console.print(
            "\n[yellow]Note:[/yellow] Gist store requires a token with [bold]gist[/bold] scope "
            "(GITHUB_TOKEN or a `gh auth login` session)."
        )
        gist_id = _create_team_gist(description or f"scanlens review history for {Path.cwd().name}")
        if gist_id:
            console.print(f"[green]Created team Gist: {gist_id}[/green]")
            config["gist_id"] = gist_id
        else:
            console.print(f"[yellow]Gist creation failed — add gist_id manually to {config_path}[/yellow]")

    _write_config(config, config_path)
    console.print(f"[green]Wrote {config_path}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Scan your project with: [bold]scanlens scan[/bold]")


def _create_team_gist(description: str) -> str | None:
    """Create a private Gist for review history and return its ID."""
    tmp_dir = tempfile.mkdtemp()
    # gh names the Gist file after the path, so the file must carry the final name.
    named_path = os.path.join(tmp_dir, _GIST_FILENAME)
    try:
        with open(named_path, "w") as f:
            f.write('{"reviews": []}')
        result = subprocess.run(
            ["gh", "gist", "create", "--public=false", "--desc", description, named_path],
            capture_output=True,
            text=True,
            timeout=15,
        )
        if result.returncode == 0:
            gist_url = result.stdout.strip()
            return gist_url.rstrip("/").split("/")[-1]
        logger.warning("gh gist create failed: %s", result.stderr.strip())
    except (FileNotFoundError, subprocess.TimeoutExpired):
        pass
    finally:
        if os.path.exists(named_path):
            os.unlink(named_path)
        os.rmdir(tmp_dir)
    return None


def _write_config(config: dict, config_path: str = ".scanlens.yml") -> None:
    """Write or update the config file, preserving any existing keys."""
    path = Path(config_path)
    existing: dict = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text())
        if isinstance(loaded, dict):
            existing = loaded
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
