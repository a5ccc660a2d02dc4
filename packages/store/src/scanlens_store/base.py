"""Abstract store interface.

Every backend persists the same thing: one JSON-compatible document of the
form ``{"reviews": [<ReviewRecord dict>, ...]}``, newest record first. The
HistoryAggregator reads the whole document, changes it and writes it back
on each call — backends need no query or append support of their own.

Backends may raise on I/O faults. Fault handling belongs to the aggregator,
so every backend behaves the same way when storage is unavailable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


def empty_document() -> dict:
    return {"reviews": []}


class BaseStore(ABC):
    """Pluggable persistence layer for review history."""

    @abstractmethod
    def load_document(self) -> dict:
        """Return the persisted document, or an empty one if nothing is stored yet."""

    @abstractmethod
    def save_document(self, document: dict) -> None:
        """Replace the persisted document."""

    def clear(self) -> None:
        """Remove all history."""
        self.save_document(empty_document())

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional — subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
