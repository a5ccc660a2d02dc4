"""GitHub token lookup for the gist history store.

Only ``store: gist`` talks to GitHub, so the lookup runs lazily from the CLI
group and never for the json or none stores. Sources, first hit wins:

  1. GITHUB_TOKEN environment variable
  2. `gh auth token` (reuses a `gh auth login` session, no PAT to copy around)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

_GH_TIMEOUT = 5


def _token_from_gh_cli() -> str | None:
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI unavailable for token lookup: %s", e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when neither source has one.

    Never raises; the CLI falls back to the no-op store when this is None.
    """
    token = os.environ.get("GITHUB_TOKEN") or _token_from_gh_cli()
    if token and "GITHUB_TOKEN" not in os.environ:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token
