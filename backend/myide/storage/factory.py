"""Factory for creating index store instances."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from ..config import cfg_fingerprint
from ..core.models import IndexSnapshot
from .base import IndexStore
from .json_store import JsonIndexStore

logger = logging.getLogger(__name__)


def make_index_store(cfg: Dict, load: bool = True) -> IndexStore:
    """Create the index store and load any persisted snapshot.

    A snapshot built under different chunking or embedding settings is not
    installed; the workspace has to be indexed again.
    """
    index_path = Path(cfg.get("index_path") or Path.home() / ".myide_rag_index.json").expanduser()
    store = JsonIndexStore(index_path)
    if load:
        snapshot = store.load()
        stored = snapshot.metadata.get("cfg_fingerprint")
        if stored and stored != cfg_fingerprint(cfg):
            logger.warning(f"Index at {index_path} was built with different chunking or embedding settings, ignoring it")
            store.replace(IndexSnapshot.empty())
    return store
