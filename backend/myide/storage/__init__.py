"""Index storage backends (single JSON snapshot)."""

from .base import IndexStore
from .factory import make_index_store
from .json_store import JsonIndexStore

__all__ = [
    "IndexStore",
    "JsonIndexStore",
    "make_index_store",
]
