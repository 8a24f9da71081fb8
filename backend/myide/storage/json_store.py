"""Single-file JSON snapshot backend."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List

from ..core.models import Chunk, IndexSnapshot
from .base import IndexStore

logger = logging.getLogger(__name__)


def _check_vectors(embeddings: List) -> None:
    """Every vector must be a non-empty list of numbers, all of one dimension."""
    dims = set()
    for i, vec in enumerate(embeddings):
        if not isinstance(vec, list) or not vec:
            raise ValueError(f"embedding {i} is not a non-empty list")
        if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in vec):
            raise ValueError(f"embedding {i} holds non-numeric values")
        dims.add(len(vec))
    if len(dims) > 1:
        raise ValueError(f"embeddings have mixed dimensions {sorted(dims)}")


class JsonIndexStore(IndexStore):

    def __init__(self, path: Path | str):
        super().__init__()
        self.path = Path(path)

    def load(self) -> IndexSnapshot:
        if not self.path.exists():
            logger.info(f"No existing index at {self.path}, starting fresh")
            self.replace(IndexSnapshot.empty())
            return self.snapshot

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            snapshot = self._decode(data)
        except Exception as e:
            logger.warning(f"Ignoring unreadable index at {self.path}: {e}")
            snapshot = IndexSnapshot.empty()

        self.replace(snapshot)
        if not snapshot.is_empty:
            logger.info(f"Loaded index: {len(snapshot)} chunks from {snapshot.workspace}")
        return snapshot

    def save(self, snapshot: IndexSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self._encode(snapshot), ensure_ascii=False)

        # Write next to the target and rename so readers never see a partial file
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.info(f"Saved index with {len(snapshot)} chunks to {self.path}")

    @staticmethod
    def _encode(snapshot: IndexSnapshot) -> Dict:
        return {
            "workspace": snapshot.workspace,
            "chunks": [c.to_dict() for c in snapshot.chunks],
            "embeddings": [list(v) for v in snapshot.embeddings],
            "indexed_at": snapshot.indexed_at,
            "metadata": snapshot.metadata,
        }

    @staticmethod
    def _decode(data: Dict) -> IndexSnapshot:
        if not isinstance(data, dict):
            raise ValueError("index root is not an object")
        chunks = [Chunk.from_dict(c) for c in data.get("chunks") or []]
        embeddings = data.get("embeddings") or []
        if len(chunks) != len(embeddings):
            raise ValueError(f"{len(chunks)} chunks but {len(embeddings)} embeddings")
        _check_vectors(embeddings)
        return IndexSnapshot.build(
            workspace=str(data.get("workspace") or ""),
            chunks=chunks,
            embeddings=embeddings,
            indexed_at=data.get("indexed_at"),
            metadata=data.get("metadata") or {},
        )
