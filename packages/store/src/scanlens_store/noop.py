"""No-op store — used when history is switched off (``store: none``).

Using a NoOpStore rather than None lets the CLI always call
aggregator.record() without conditional checks.
"""

from __future__ import annotations

from scanlens_store.base import BaseStore, empty_document


class NoOpStore(BaseStore):
    """Silently discards all records — zero configuration required."""

    def load_document(self) -> dict:
        return empty_document()

    def save_document(self, document: dict) -> None:
        pass  # intentional no-op
