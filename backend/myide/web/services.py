"""Process-wide service objects shared by the routes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import HTTPException, Request

from ..agents import GenerationPipeline
from ..config import load_config
from ..core import make_embedder
from ..errors import ConfigError
from ..indexing import WorkspaceIndexer
from ..llm import ChatClient, create_client
from ..memory import MemoryStore
from ..prompt import ContextGatherer
from ..research import WebResearcher
from ..search import DefaultSearcher
from ..storage import IndexStore, make_index_store

logger = logging.getLogger(__name__)


@dataclass
class Services:
    cfg: Dict
    store: IndexStore
    indexer: WorkspaceIndexer
    searcher: DefaultSearcher
    memory: MemoryStore
    gatherer: ContextGatherer
    client: Optional[ChatClient] = None
    pipeline: Optional[GenerationPipeline] = None

    @classmethod
    def build(cls, cfg: Dict | None = None, client: Optional[ChatClient] = None) -> "Services":
        cfg = cfg or load_config()
        store = make_index_store(cfg)
        embedder = make_embedder(cfg)
        searcher = DefaultSearcher.from_config(store, embedder, cfg)

        memory = MemoryStore(cfg["memory"]["path"], max_facts=int(cfg["memory"].get("max_facts", 100)))
        memory.load()

        context_cfg = cfg.get("context", {})
        gatherer = ContextGatherer(
            searcher=searcher,
            memory=memory,
            researcher=WebResearcher() if context_cfg.get("research_enabled", True) else None,
            top_k=int(cfg.get("search", {}).get("top_k", 5)),
            max_file_tokens=int(context_cfg.get("max_file_context_tokens", 2000)),
        )

        if client is None:
            try:
                client = create_client(cfg)
            except ConfigError as e:
                logger.warning(f"Chat disabled: {e}")

        return cls(
            cfg=cfg,
            store=store,
            indexer=WorkspaceIndexer(store, embedder, cfg),
            searcher=searcher,
            memory=memory,
            gatherer=gatherer,
            client=client,
            pipeline=GenerationPipeline(client) if client is not None else None,
        )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_pipeline(request: Request) -> GenerationPipeline:
    pipeline = get_services(request).pipeline
    if pipeline is None:
        raise HTTPException(status_code=503, detail="No language model configured (set LLM_API_KEY)")
    return pipeline
