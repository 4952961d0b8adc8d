from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from collab_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from collab_chat.api.v1.routers import (
    connections,
    conversations,
    deals,
    health,
    messages,
    ws,
)
from collab_chat.application.exceptions import (
    AppError,
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
)
from collab_chat.config import settings
from collab_chat.infrastructure.db.session import engine
from collab_chat.infrastructure.ws.manager import SessionManager
from collab_chat.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Chat service starting")

    yield

    await engine.dispose()
    logger.info("Database pool disposed (%d sockets were open)", app.state.sessions.connection_count)


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Collab Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    # one delivery process owns every live socket
    app.state.sessions = SessionManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(connections.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(deals.router)
    app.include_router(ws.router)

    return app


_STATUS_BY_ERROR: dict[type[AppError], int] = {
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidArgumentError: 422,
}


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        status_code = _STATUS_BY_ERROR.get(type(exc), 500)
        if status_code == 500:
            logger.error("Request failed: %s %s", exc.code, exc.detail)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.detail, "error": exc.code},
        )

    @app.exception_handler(Exception)
    async def _unexpected(_req: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error": ServerError.code},
        )
