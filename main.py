"""
Postboard — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router
from auth.guard import SessionGuard
from config.settings import Settings, config
from core.context import AppContext, build_context

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "uvicorn.access", "aiosqlite", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """
    Build the FastAPI app around an explicit ``AppContext``.

    Raises ``ConfigurationError`` when required settings (the token
    secret) are missing, so a misconfigured deployment never starts.
    """
    if context is None:
        context = build_context(settings or config)
    settings = context.settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_tables:
            logger.info("Ensuring database tables exist…")
            await context.store.create_tables()
        logger.info("Application ready to accept requests.")
        yield
        await context.store.dispose()
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="Postboard",
        version="1.0.0",
        description="Minimal social posting app.",
        lifespan=lifespan,
    )
    app.state.ctx = context
    app.state.guard = SessionGuard(policy=settings.guard_policy)

    register_middleware(app)
    register_exception_handlers(app)
    app.include_router(router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
