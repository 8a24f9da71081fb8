"""Configuration management for myide."""

from .manager import (
    DEFAULT_CONFIG,
    INDEXABLE_EXTENSIONS,
    SKIP_NAMES,
    load_config,
    validate_config,
    cfg_fingerprint,
)

__all__ = [
    "DEFAULT_CONFIG",
    "INDEXABLE_EXTENSIONS",
    "SKIP_NAMES",
    "load_config",
    "validate_config",
    "cfg_fingerprint",
]
