"""Semantic search over the codebase index."""

from .base import Searcher
from .searcher import DefaultSearcher, cosine_similarity

__all__ = [
    "Searcher",
    "DefaultSearcher",
    "cosine_similarity",
]
