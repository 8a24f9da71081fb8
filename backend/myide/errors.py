"""Exception types shared across myide."""

from __future__ import annotations


class MyIDEError(Exception):
    """Base class for myide errors."""


class ConfigError(MyIDEError):
    """Invalid configuration (chunk sizes, backends, ...)."""


class ProviderError(MyIDEError):
    """Embedding or generation provider failed."""


class AlreadyIndexingError(MyIDEError):
    """An index run is already in flight."""

    def __init__(self, message: str = "Already indexing") -> None:
        super().__init__(message)
