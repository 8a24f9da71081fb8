"""Utility functions for myide."""

from .file_utils import (
    is_binary_file,
    file_extension,
)

__all__ = [
    "is_binary_file",
    "file_extension",
]
