"""Abstract index storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict

from ..core.models import IndexProgress, IndexSnapshot


class IndexStore(ABC):
    """Owns the single in-process index snapshot and its persistence.

    Readers always go through ``snapshot``; writers build a complete new
    snapshot and hand it to ``replace``.
    """

    def __init__(self) -> None:
        self._snapshot: IndexSnapshot = IndexSnapshot.empty()
        self.progress = IndexProgress()
        self.is_indexing = False

    @property
    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    def replace(self, snapshot: IndexSnapshot) -> None:
        """Install a fully built snapshot."""
        self._snapshot = snapshot

    @abstractmethod
    def load(self) -> IndexSnapshot:
        """Load the persisted snapshot and install it. Never raises."""
        pass

    @abstractmethod
    def save(self, snapshot: IndexSnapshot) -> None:
        """Persist a snapshot."""
        pass

    def status(self) -> Dict:
        snap = self._snapshot
        return {
            "indexed": not snap.is_empty,
            "chunks": len(snap),
            "workspace": snap.workspace,
            "indexed_at": snap.indexed_at,
            "is_indexing": self.is_indexing,
            "progress": self.progress.to_dict(),
        }
