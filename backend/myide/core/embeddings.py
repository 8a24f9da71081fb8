"""Embedding models for semantic search."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

from openai import APIError, OpenAI
from starlette.concurrency import run_in_threadpool

from ..errors import ConfigError, ProviderError

logger = logging.getLogger(__name__)


class Embedder:
    """Abstract base class for embedding models."""

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts into vectors, one per input, same order."""
        raise NotImplementedError

    def embed_one(self, text: str) -> List[float]:
        """Embed a single text into a vector."""
        return self.embed([text])[0]

    async def aembed(self, texts: List[str]) -> List[List[float]]:
        """Embed without blocking the event loop."""
        vectors = await run_in_threadpool(self.embed, texts)
        if len(vectors) != len(texts):
            raise ProviderError(f"Embedding provider returned {len(vectors)} vectors for {len(texts)} inputs")
        return vectors


class SentenceTransformersEmbedder(Embedder):
    """Embedder using SentenceTransformers library."""

    def __init__(self, model_name: str) -> None:
        from sentence_transformers import SentenceTransformer  # type: ignore
        self.model = SentenceTransformer(model_name)

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed texts using SentenceTransformers model."""
        if not texts:
            return []
        try:
            arr = self.model.encode(texts, show_progress_bar=False)
        except Exception as e:
            raise ProviderError(f"sentence-transformers encode failed: {e}") from e
        return [row.tolist() for row in arr]


class OpenAIEmbedder(Embedder):
    """Embedder for OpenAI-compatible ``/embeddings`` endpoints."""

    def __init__(
        self,
        model: str,
        api_base: str,
        api_key: str | None = None,
        timeout: int = 60,
        client: Any = None,
    ) -> None:
        self.model = model
        self.api_base = api_base
        self.api_key = api_key or os.getenv("OPENAI_API_KEY") or os.getenv("LLM_API_KEY")
        if not self.api_key:
            raise ConfigError("OPENAI_API_KEY environment variable not set")
        self.client = client or OpenAI(api_key=self.api_key, base_url=api_base, timeout=timeout)

    def embed(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            response = self.client.embeddings.create(model=self.model, input=texts)
        except APIError as e:
            raise ProviderError(f"Embedding request failed: {e}") from e

        vectors = [list(item.embedding) for item in response.data]
        if len(vectors) != len(texts):
            raise ProviderError(f"Embedding provider returned {len(vectors)} vectors for {len(texts)} inputs")
        return vectors


def make_embedder(cfg: Dict) -> Embedder:
    """Create embedder from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        Embedder instance

    Raises:
        ConfigError: If backend is invalid or dependencies are missing
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "sentence_transformers")).strip().lower()

    if backend == "openai":
        return OpenAIEmbedder(
            model=emb_cfg.get("openai_model", "text-embedding-3-small"),
            api_base=emb_cfg.get("api_base", "https://api.openai.com/v1"),
            timeout=int(emb_cfg.get("timeout", 60)),
        )

    if backend != "sentence_transformers":
        raise ConfigError(f"Invalid embedding.backend: {backend!r}")

    model_name = emb_cfg.get("sentence_transformers_model", "all-MiniLM-L6-v2")
    try:
        return SentenceTransformersEmbedder(model_name)
    except Exception as e:
        raise ConfigError(
            "Could not load sentence-transformers. "
            "Run: pip install -U sentence-transformers"
        ) from e
