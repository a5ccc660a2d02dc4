"""GistStore — shared review history via GitHub Gist.

Why Gist as the team store:
- Zero infra: no DB to provision, no server to maintain.
- Built-in access control: anyone with access to the Gist can read the
  team's review history with `scanlens timeline`.
- Same document as the local JSON store, so switching backends is a one-line
  change in .scanlens.yml.

Data format: a single JSON file named `scanlens_history.json` inside the Gist,
holding ``{"reviews": [...]}`` with the newest record first.
"""

from __future__ import annotations

import json
import logging

from github import Auth, Github, InputFileContent

from scanlens_store.base import BaseStore, empty_document

logger = logging.getLogger(__name__)

_GIST_FILENAME = "scanlens_history.json"


class GistStore(BaseStore):
    """Stores review history in a GitHub Gist.

    Every save replaces the whole file — suitable for hundreds or low
    thousands of records inside the retention window.

    The Gist ID is stored in .scanlens.yml under `gist_id`. Running
    `scanlens init` creates the Gist and writes the ID to .scanlens.yml
    automatically.
    """

    def __init__(self, gist_id: str, token: str):
        self._gist_id = gist_id
        self._gh = Github(auth=Auth.Token(token))

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def load_document(self) -> dict:
        file_obj = self._get_gist().files.get(_GIST_FILENAME)
        if file_obj is None or not file_obj.content:
            return empty_document()
        document = json.loads(file_obj.content)
        # Older gists created by `gh gist create` hold a bare list.
        if isinstance(document, list):
            return {"reviews": document}
        if not isinstance(document, dict):
            raise ValueError(f"Gist {self._gist_id} does not contain a review history document")
        document.setdefault("reviews", [])
        return document

    def save_document(self, document: dict) -> None:
        gist = self._get_gist()
        gist.edit(files={_GIST_FILENAME: InputFileContent(json.dumps(document, indent=2))})
        logger.debug("Saved %d review(s) to gist %s", len(document.get("reviews", [])), self._gist_id)

    def close(self) -> None:
        self._gh.close()
