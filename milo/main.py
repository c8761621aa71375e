"""FastAPI application entry point.

This module initialises the FastAPI app, configures logging, prepares the
conversations table and registers API routes.  The ``uvicorn`` ASGI server
can point to ``milo.main:app`` to serve the application.
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .utils.logger import setup_logging
from .config.app_config import get_app_config
from .config.email_config import get_email_config
from .controllers.chat_controller import router as chat_router
from .controllers.admin_controller import router as admin_router
from .controllers.digest_controller import router as digest_router
from .services.digest_scheduler import digest_scheduler_loop
from .storage.db import get_engine, init_db
from .utils.error_handler import (
    GatewayError,
    MiloError,
    QueryError,
    RequestError,
    gateway_error_handler,
    milo_error_handler,
    query_error_handler,
    request_error_handler,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the table on startup and run the digest scheduler if enabled."""
    init_db(get_engine())

    scheduler_task = None
    if get_email_config().digest_schedule_enabled:
        scheduler_task = asyncio.create_task(digest_scheduler_loop())
    try:
        yield
    finally:
        if scheduler_task is not None:
            scheduler_task.cancel()
            with suppress(asyncio.CancelledError):
                await scheduler_task


def create_app() -> FastAPI:
    """Create and configure a FastAPI application."""
    setup_logging()

    app = FastAPI(title="Milo Chat API", version="0.1.0", lifespan=lifespan)

    # Enable CORS for all origins; adjust in production as needed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestError, request_error_handler)
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(QueryError, query_error_handler)
    app.add_exception_handler(MiloError, milo_error_handler)

    app.include_router(chat_router)
    app.include_router(admin_router)
    app.include_router(digest_router)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        logger.debug("Health check invoked")
        return {"status": "ok"}

    return app


# Create an application instance for ASGI servers
app = create_app()


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    app_config = get_app_config()
    uvicorn.run("milo.main:app", host=app_config.app_host, port=app_config.app_port, reload=app_config.app_debug)
