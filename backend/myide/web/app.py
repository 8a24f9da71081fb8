"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import AlreadyIndexingError, ConfigError
from .routes import chat, indexing, memory, search
from .services import Services

logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = Services.build()
        yield

    app = FastAPI(title="MyIDE Backend", lifespan=lifespan)
    app.state.services = services

    # Setup CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AlreadyIndexingError)
    async def _already_indexing(request: Request, exc: AlreadyIndexingError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def _config_error(request: Request, exc: ConfigError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    api_router = APIRouter(prefix="/api")

    api_router.include_router(indexing.router)
    api_router.include_router(search.router)
    api_router.include_router(chat.router)
    api_router.include_router(memory.router)

    app.include_router(api_router)
    return app
