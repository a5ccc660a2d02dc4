"""JsonFileStore — the default, one JSON file per workspace.

The file lives at ``.scanlens/review-history.json`` unless ``store_path``
says otherwise. Writes go to a sibling temp file which is then renamed over
the target, so a crash mid-write never leaves a truncated history behind.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from scanlens_store.base import BaseStore, empty_document

logger = logging.getLogger(__name__)


class JsonFileStore(BaseStore):
    def __init__(self, path: str = ".scanlens/review-history.json"):
        self.path = Path(path)

    def load_document(self) -> dict:
        if not self.path.exists():
            return empty_document()
        document = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(document, dict) or not isinstance(document.get("reviews", []), list):
            raise ValueError(f"{self.path} does not contain a review history document")
        document.setdefault("reviews", [])
        return document

    def save_document(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(document, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Deleted review history at %s", self.path)
