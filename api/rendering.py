"""
Turns a ``HandlerResult`` into a Starlette response: a rendered Jinja2
template or a 303 redirect, plus any session-cookie change.
"""

from __future__ import annotations

import pathlib

from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from config.settings import Settings
from core.handler import HandlerResult

TEMPLATES_DIR = pathlib.Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_result(request: Request, settings: Settings, result: HandlerResult) -> Response:
    if result.redirect_to is not None:
        response: Response = RedirectResponse(result.redirect_to, status_code=result.status)
    else:
        response = templates.TemplateResponse(
            request,
            result.template,
            result.context,
            status_code=result.status,
        )

    if result.credential is not None:
        response.set_cookie(
            key=settings.cookie_name,
            value=result.credential,
            max_age=settings.jwt_expiry_seconds,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )
    elif result.clear_credential:
        response.delete_cookie(
            key=settings.cookie_name,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )
    return response


def render_error(request: Request, status_code: int, message: str) -> Response:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )
