"""Core functionality for myide."""

from .models import Chunk, IndexSnapshot, IndexProgress, IndexResult, SearchHit
from .chunking import chunk_file, Chunker, LineWindowChunker
from .embeddings import Embedder, OpenAIEmbedder, SentenceTransformersEmbedder, make_embedder

__all__ = [
    "Chunk",
    "IndexSnapshot",
    "IndexProgress",
    "IndexResult",
    "SearchHit",
    "chunk_file",
    "Chunker",
    "LineWindowChunker",
    "Embedder",
    "OpenAIEmbedder",
    "SentenceTransformersEmbedder",
    "make_embedder",
]
