"""Indexing routes with SSE support."""

import asyncio
import functools
import json
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from ...errors import AlreadyIndexingError
from ..schemas import IndexRequest, IndexStatusResponse
from ..services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/index")


def _finish_run(queue: asyncio.Queue, task: asyncio.Task) -> None:
    """Collect the run's outcome and close the progress stream."""
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Indexing run ended with {task.exception()!r}")
    queue.put_nowait(None)


@router.post("")
async def start_indexing(request: IndexRequest, services: Services = Depends(get_services)):
    """Index a workspace, streaming progress events until the run ends."""
    workspace = Path(request.workspace).expanduser()
    if not workspace.is_dir():
        raise HTTPException(status_code=400, detail=f"Not a directory: {workspace}")
    if services.indexer.is_indexing:
        raise AlreadyIndexingError()

    queue: asyncio.Queue = asyncio.Queue()
    task = asyncio.create_task(services.indexer.index_workspace(workspace, on_progress=queue.put_nowait))
    # The run keeps going if the client disconnects; the sentinel ends the stream
    task.add_done_callback(functools.partial(_finish_run, queue))

    async def event_generator():
        """Generate SSE events for progress updates."""
        while True:
            progress = await queue.get()
            if progress is None:
                break
            yield {"event": "progress", "data": json.dumps(progress.to_dict())}

        if not task.cancelled() and isinstance(task.exception(), AlreadyIndexingError):
            yield {"event": "progress", "data": json.dumps({"status": "error", "message": str(task.exception())})}

    return EventSourceResponse(event_generator())


@router.get("/status", response_model=IndexStatusResponse)
async def index_status(services: Services = Depends(get_services)):
    return services.store.status()
