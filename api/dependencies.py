"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from fastapi import Request

from auth.guard import SessionGuard
from core.context import AppContext
from core.handler import HandlerRequest


async def get_context(request: Request) -> AppContext:
    """The application context built in ``create_app()``."""
    return request.app.state.ctx


async def get_guard(request: Request) -> SessionGuard:
    return request.app.state.guard


async def to_handler_request(request: Request, cookie_name: str) -> HandlerRequest:
    """
    Copy what the flows need out of the Starlette request.

    Identity is never taken from here; only the session guard sets it.
    """
    form = {}
    if request.method == "POST":
        data = await request.form()
        form = {key: value for key, value in data.items() if isinstance(value, str)}

    return HandlerRequest(
        credential=request.cookies.get(cookie_name),
        path_params={key: str(value) for key, value in request.path_params.items()},
        form=form,
        referer=request.headers.get("referer"),
        host=request.headers.get("host"),
    )
