"""
HTTP routes.

Each route builds a ``HandlerRequest``, runs the matching flow handler
(behind the session guard where required) and renders the result.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from api.dependencies import get_context, get_guard, to_handler_request
from api.rendering import render_result
from auth import flow as auth_flow
from auth.guard import Handler
from posts import flow as post_flow

router = APIRouter()


async def _dispatch(request: Request, handler: Handler, protected: bool = False) -> Response:
    ctx = await get_context(request)
    if protected:
        guard = await get_guard(request)
        handler = guard.protect(handler)

    handler_request = await to_handler_request(request, ctx.settings.cookie_name)
    result = await handler(ctx, handler_request)
    return render_result(request, ctx.settings, result)


# ── Auth ───────────────────────────────────────────────────────────────


@router.get("/")
async def index(request: Request) -> Response:
    return await _dispatch(request, auth_flow.index)


@router.get("/register")
async def register_form(request: Request) -> Response:
    return await _dispatch(request, auth_flow.show_register)


@router.post("/register")
async def register(request: Request) -> Response:
    return await _dispatch(request, auth_flow.register)


@router.get("/login")
async def login_form(request: Request) -> Response:
    return await _dispatch(request, auth_flow.show_login)


@router.post("/login")
async def login(request: Request) -> Response:
    return await _dispatch(request, auth_flow.login)


@router.post("/logout")
async def logout(request: Request) -> Response:
    return await _dispatch(request, auth_flow.logout)


# ── Posts ──────────────────────────────────────────────────────────────


@router.get("/dashboard")
async def dashboard(request: Request) -> Response:
    return await _dispatch(request, post_flow.dashboard, protected=True)


@router.post("/post")
async def create_post(request: Request) -> Response:
    return await _dispatch(request, post_flow.create_post, protected=True)


@router.post("/post/{post_id}/like")
async def toggle_like(request: Request, post_id: str) -> Response:
    return await _dispatch(request, post_flow.toggle_like, protected=True)


@router.get("/post/{post_id}/edit")
async def edit_form(request: Request, post_id: str) -> Response:
    return await _dispatch(request, post_flow.show_edit, protected=True)


@router.post("/post/{post_id}/edit")
async def edit_post(request: Request, post_id: str) -> Response:
    return await _dispatch(request, post_flow.edit_post, protected=True)


@router.post("/post/{post_id}/delete")
async def delete_post(request: Request, post_id: str) -> Response:
    return await _dispatch(request, post_flow.delete_post, protected=True)


# ── Ops ────────────────────────────────────────────────────────────────


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}
