"""Indexing functionality for myide."""

from .discovery import collect_files
from .indexer import WorkspaceIndexer, scan_workspace

__all__ = [
    "collect_files",
    "scan_workspace",
    "WorkspaceIndexer",
]
