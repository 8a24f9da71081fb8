"""Long-term developer memory."""

from .store import MemoryFact, MemoryStore, normalized_duplicate, prefix_duplicate

__all__ = [
    "MemoryFact",
    "MemoryStore",
    "normalized_duplicate",
    "prefix_duplicate",
]
