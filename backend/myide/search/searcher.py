"""Semantic search functionality."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import numpy as np

from ..core import Embedder, SearchHit
from ..errors import ProviderError
from ..storage import IndexStore
from .base import Searcher

logger = logging.getLogger(__name__)

EPSILON = 1e-10


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    return float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb) + EPSILON))


def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``."""
    q = np.asarray(query, dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q) + EPSILON
    return (matrix @ q) / norms


class DefaultSearcher(Searcher):
    """Cosine ranking over the current snapshot with a per-file diversity cap.

    Walking the ranked list, a hit is accepted while its file has fewer than
    ``per_file_cap`` accepted hits, or while fewer than ``always_admit`` hits
    have been accepted overall. Hits scoring at or below ``min_score`` end the
    walk, so fewer than ``top_k`` results (or none) is a normal outcome.
    """

    def __init__(
        self,
        store: IndexStore,
        embedder: Embedder,
        min_score: float = 0.3,
        per_file_cap: int = 1,
        always_admit: int = 2,
    ):
        self.store = store
        self.embedder = embedder
        self.min_score = min_score
        self.per_file_cap = per_file_cap
        self.always_admit = always_admit
        self._matrix_for = None
        self._matrix = None

    @classmethod
    def from_config(cls, store: IndexStore, embedder: Embedder, cfg: Dict) -> "DefaultSearcher":
        search_cfg = cfg.get("search", {})
        return cls(
            store,
            embedder,
            min_score=float(search_cfg.get("min_score", 0.3)),
            per_file_cap=int(search_cfg.get("per_file_cap", 1)),
            always_admit=int(search_cfg.get("always_admit", 2)),
        )

    def _embedding_matrix(self, snapshot) -> np.ndarray:
        # Rebuilt only when a new snapshot has been swapped in
        if self._matrix_for is not snapshot:
            self._matrix = np.asarray(snapshot.embeddings, dtype=np.float64)
            self._matrix_for = snapshot
        return self._matrix

    async def search(self, query: str, top_k: int = 5) -> List[SearchHit]:
        snapshot = self.store.snapshot
        if snapshot.is_empty or top_k <= 0:
            return []

        try:
            [query_vector] = await self.embedder.aembed([query])
        except ProviderError as e:
            logger.error(f"Search error: {e}")
            return []

        matrix = self._embedding_matrix(snapshot)
        if len(query_vector) != matrix.shape[1]:
            logger.warning(
                f"Query embedding has {len(query_vector)} dimensions but the index has {matrix.shape[1]}; "
                "re-index the workspace with the current embedding model"
            )
            return []

        scores = cosine_scores(query_vector, matrix)
        order = np.argsort(-scores, kind="stable")

        results: List[SearchHit] = []
        per_file: Dict[str, int] = {}
        for idx in order:
            score = float(scores[idx])
            if score <= self.min_score:
                break
            chunk = snapshot.chunks[idx]
            taken = per_file.get(chunk.file_path, 0)
            if taken < self.per_file_cap or len(results) < self.always_admit:
                per_file[chunk.file_path] = taken + 1
                results.append((score, chunk))
                if len(results) >= top_k:
                    break
        return results

