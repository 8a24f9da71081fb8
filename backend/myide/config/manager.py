"""Configuration management for myide."""

from __future__ import annotations

import copy
import hashlib
import json
import os
from pathlib import Path
from typing import Dict, List

from ..errors import ConfigError


INDEXABLE_EXTENSIONS: List[str] = [
    "js", "jsx", "ts", "tsx", "py", "html", "css", "scss",
    "json", "md", "sh", "yaml", "yml", "env", "sql",
    "rs", "go", "rb", "php", "java", "c", "cpp", "cs",
    "swift", "kt", "vue", "svelte", "graphql", "prisma",
]

SKIP_NAMES: List[str] = [
    "node_modules", ".git", "__pycache__", ".next", "dist",
    "build", ".cache", "coverage", ".nyc_output", "venv",
    ".env", "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
]

DEFAULT_CONFIG: Dict = {
    "index_path": str(Path.home() / ".myide_rag_index.json"),
    "max_file_size_kb": 500,
    "max_depth": 32,
    "chunk_size": 60,
    "chunk_overlap": 10,
    "min_chunk_chars": 20,
    "embed_batch_size": 100,
    "max_embed_chars": 8000,
    "embedding": {
        "backend": "sentence_transformers",
        "sentence_transformers_model": "sentence-transformers/all-MiniLM-L6-v2",
        "openai_model": "text-embedding-3-small",
        "api_base": "https://api.openai.com/v1",
        "timeout": 60,
    },
    "search": {
        "top_k": 5,
        "min_score": 0.3,
        "per_file_cap": 1,
        "always_admit": 2,
    },
    "llm": {
        "api_base": "https://api.openai.com/v1",
        "model": "gpt-4o",
        "max_tokens": 4096,
        "temperature": 0.2,
        "timeout": 120,
    },
    "context": {
        "max_file_context_tokens": 2000,
        "research_enabled": True,
    },
    "memory": {
        "path": str(Path.home() / ".myide_memory.json"),
        "max_facts": 100,
    },
}


def load_config() -> Dict:
    """Load configuration.

    Returns a copy of the default configuration with environment overrides.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config["index_path"] = os.getenv("MYIDE_INDEX_PATH", config["index_path"])
    config["memory"]["path"] = os.getenv("MYIDE_MEMORY_PATH", config["memory"]["path"])

    config["embedding"]["backend"] = os.getenv("EMBEDDING_BACKEND", config["embedding"]["backend"])
    if os.getenv("EMBEDDING_MODEL"):
        if config["embedding"]["backend"] == "openai":
            config["embedding"]["openai_model"] = os.environ["EMBEDDING_MODEL"]
        else:
            config["embedding"]["sentence_transformers_model"] = os.environ["EMBEDDING_MODEL"]

    config["llm"]["api_base"] = os.getenv("LLM_API_BASE", config["llm"]["api_base"])
    config["llm"]["model"] = os.getenv("LLM_MODEL", config["llm"]["model"])

    validate_config(config)
    return config


def validate_config(cfg: Dict) -> None:
    """Raise ConfigError for settings the indexer cannot work with."""
    chunk_size = int(cfg.get("chunk_size", 60))
    overlap = int(cfg.get("chunk_overlap", 10))
    if chunk_size < 1:
        raise ConfigError(f"chunk_size must be >= 1, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ConfigError(f"chunk_overlap must be in [0, chunk_size), got {overlap} (chunk_size={chunk_size})")
    if int(cfg.get("embed_batch_size", 100)) < 1:
        raise ConfigError("embed_batch_size must be >= 1")


def cfg_fingerprint(cfg: Dict) -> str:
    """Generate fingerprint hash for the settings that shape the index."""
    keys = ("chunk_size", "chunk_overlap", "min_chunk_chars", "max_embed_chars", "embedding")
    payload = json.dumps({k: cfg.get(k) for k in keys}, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
