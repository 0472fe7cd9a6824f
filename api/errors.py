"""
Global exception handlers.

Every ``PostboardError`` becomes an error page with its own status and
message. ``ServerError`` and anything unexpected are logged with full
detail and rendered with a generic message only.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request

from api.rendering import render_error
from core.exceptions import PostboardError, ServerError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal Server Error"


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ServerError)
    async def handle_server_error(request: Request, exc: ServerError):
        logger.error(
            "Server error on %s %s: %s | context: %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return render_error(request, 500, GENERIC_ERROR)

    @app.exception_handler(PostboardError)
    async def handle_app_error(request: Request, exc: PostboardError):
        logger.info(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
        return render_error(request, exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return render_error(request, 500, GENERIC_ERROR)
