"""Prompt context assembly."""

from .assembler import (
    ContextGatherer,
    assemble_context,
    count_tokens,
    format_retrieval_context,
)

__all__ = [
    "ContextGatherer",
    "assemble_context",
    "count_tokens",
    "format_retrieval_context",
]
