"""Context block assembly for generation calls."""

from __future__ import annotations

import functools
import logging
from typing import List, Optional, Sequence

import tiktoken
from starlette.concurrency import run_in_threadpool

from ..core import SearchHit
from ..memory import MemoryStore
from ..research import WebResearcher, format_research_context, should_research
from ..search import Searcher

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def _encoder() -> "tiktoken.Encoding":
    # cl100k_base is close enough for budgeting against most chat models
    return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str) -> int:
    return len(_encoder().encode(text))


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    tokens = _encoder().encode(text)
    if len(tokens) <= max_tokens:
        return text
    return _encoder().decode(tokens[:max_tokens]) + "\n…(truncated)…"


def format_file_context(file_context: str, file_path: Optional[str] = None, max_tokens: int = 2000) -> str:
    if not file_context:
        return ""
    body = truncate_to_tokens(file_context, max_tokens)
    return f"## Current file: {file_path or 'untitled'}\n```\n{body}\n```"


def _format_context_item(score: float, chunk) -> str:
    return (
        f"### {chunk.file_path} (lines {chunk.start_line}-{chunk.end_line}, relevance: {score * 100:.0f}%)\n"
        f"```\n{chunk.raw_text}\n```"
    )


def format_retrieval_context(results: Sequence[SearchHit]) -> str:
    if not results:
        return ""
    parts = [_format_context_item(score, chunk) for score, chunk in results]
    return "## Relevant code from your codebase:\n\n" + "\n\n".join(parts)


def assemble_context(
    user_query: str,
    file_context: str,
    memory_block: str,
    results: Sequence[SearchHit],
    research_block: str,
    file_path: Optional[str] = None,
    max_file_tokens: int = 2000,
) -> str:
    """Join the non-empty context parts in fixed order.

    Order: memory facts, current file, retrieved code, research findings.
    ``user_query`` is accepted so callers pass one request object through;
    it is not repeated in the block.
    """
    parts = [
        memory_block or "",
        format_file_context(file_context, file_path, max_file_tokens),
        format_retrieval_context(results),
        research_block or "",
    ]
    return "\n\n".join(p for p in parts if p.strip())


class ContextGatherer:
    """Collects every context part for one request and assembles the block.

    A failing collaborator contributes an empty part; gathering never raises
    because of retrieval, memory or research.
    """

    def __init__(
        self,
        searcher: Optional[Searcher] = None,
        memory: Optional[MemoryStore] = None,
        researcher: Optional[WebResearcher] = None,
        top_k: int = 5,
        max_file_tokens: int = 2000,
    ):
        self.searcher = searcher
        self.memory = memory
        self.researcher = researcher
        self.top_k = top_k
        self.max_file_tokens = max_file_tokens

    async def retrieve(self, query: str) -> List[SearchHit]:
        if self.searcher is None or not query.strip():
            return []
        try:
            return await self.searcher.search(query, self.top_k)
        except Exception as e:
            logger.error(f"Retrieval failed, continuing without code context: {e}")
            return []

    def memory_block(self) -> str:
        if self.memory is None:
            return ""
        try:
            return self.memory.get_context_block()
        except Exception as e:
            logger.warning(f"Memory unavailable: {e}")
            return ""

    async def research_block(self, query: str, use_research: bool = True) -> str:
        if self.researcher is None or not use_research or not should_research(query):
            return ""
        try:
            findings = await run_in_threadpool(self.researcher.research, query)
        except Exception as e:
            logger.warning(f"Research failed: {e}")
            return ""
        return format_research_context(findings)

    async def gather(
        self,
        query: str,
        file_context: str = "",
        file_path: Optional[str] = None,
        use_rag: bool = True,
        use_research: bool = True,
    ) -> str:
        results = await self.retrieve(query) if use_rag else []
        research = await self.research_block(query, use_research)
        return assemble_context(
            user_query=query,
            file_context=file_context,
            memory_block=self.memory_block(),
            results=results,
            research_block=research,
            file_path=file_path,
            max_file_tokens=self.max_file_tokens,
        )
