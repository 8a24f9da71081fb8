"""Chat and agent-team routes streaming pipeline events over SSE."""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse
from starlette.concurrency import run_in_threadpool

from ...agents import GenerationPipeline, PipelineEvent
from ..schemas import ChatRequest, TeamRequest
from ..services import Services, get_pipeline, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai")


def _sse(event: PipelineEvent) -> dict:
    return {"event": event.type, "data": event.model_dump_json(exclude_none=True)}


@router.post("/chat")
async def chat(
    request: ChatRequest,
    services: Services = Depends(get_services),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    messages = [m.model_dump() for m in request.messages]
    last_user = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")

    async def event_generator() -> AsyncIterator[dict]:
        context_block = await services.gatherer.gather(
            last_user,
            file_context=request.file_context or "",
            file_path=request.file_path,
            use_rag=request.use_rag,
            use_research=request.use_research,
        )
        reply = None
        async for event in pipeline.chat(messages, context_block):
            if event.type == "all-done":
                reply = (event.outputs or {}).get("assistant")
            yield _sse(event)

        if reply and last_user and services.client is not None:
            facts = await run_in_threadpool(services.memory.extract_facts, last_user, reply, services.client)
            if facts:
                logger.info(f"Remembered {len(facts)} new facts")

    return EventSourceResponse(event_generator())


@router.post("/team")
async def team(
    request: TeamRequest,
    services: Services = Depends(get_services),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    async def event_generator() -> AsyncIterator[dict]:
        context_block = await services.gatherer.gather(
            request.request,
            file_context=request.file_context or "",
            file_path=request.file_path,
            use_rag=request.use_rag,
            use_research=request.use_research,
        )
        async for event in pipeline.run_team(request.request, context_block):
            yield _sse(event)

    return EventSourceResponse(event_generator())
