"""Searcher Interface."""

from __future__ import annotations

from typing import List

from ..core import SearchHit


class Searcher:
    """Abstract base class for semantic search."""

    async def search(self, query: str, top_k: int = 5) -> List[SearchHit]:
        """Search for code chunks semantically similar to query.

        Args:
            query: Search query text
            top_k: Maximum number of results to return

        Returns:
            List of (score, Chunk) tuples sorted by relevance
        """
        raise NotImplementedError
