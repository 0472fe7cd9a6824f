"""
Auth flow — registration, login and logout decisions.

Handlers take the application context and a ``HandlerRequest`` and
return a ``HandlerResult``; failures are raised as ``PostboardError``
subclasses.
"""

from __future__ import annotations

import logging
from typing import Dict, Type, TypeVar

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from starlette.concurrency import run_in_threadpool

from core.context import AppContext
from core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotAuthenticatedError,
    NotFoundError,
    PostboardError,
    ServerError,
)
from core.handler import HandlerRequest, HandlerResult

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"

# bcrypt ignores (or rejects) anything past 72 bytes
_BCRYPT_MAX_BYTES = 72


# ── Form schemas ───────────────────────────────────────────────────────


class RegisterForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    username: str = Field(
        ...,
        min_length=2,
        max_length=64,
        validation_alias=AliasChoices("username", "userName"),
    )
    email: str = Field(..., min_length=3, max_length=255)
    age: int = Field(..., ge=0, le=150)
    password: str = Field(..., min_length=1)

    @field_validator("name", "username")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("must be an email address")
        return v

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode()) > _BCRYPT_MAX_BYTES:
            raise ValueError(f"must be at most {_BCRYPT_MAX_BYTES} bytes")
        return v


class LoginForm(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


FormT = TypeVar("FormT", bound=BaseModel)


def parse_form(model: Type[FormT], data: Dict[str, str]) -> FormT:
    """Validate raw form fields, turning pydantic errors into ``InvalidInputError``."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        message = f"{field}: {first['msg']}" if field else first["msg"]
        raise InvalidInputError(message, field=field) from exc


# ── Pages ──────────────────────────────────────────────────────────────


async def index(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    return HandlerResult.redirect(LOGIN_PATH)


async def show_register(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    return HandlerResult.render("register.html")


async def show_login(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    return HandlerResult.render("login.html")


# ── Actions ────────────────────────────────────────────────────────────


async def register(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    """Create the user, issue a credential and redirect."""
    form = parse_form(RegisterForm, request.form)

    try:
        if await ctx.store.get_user_by_email(form.email) is not None:
            raise ConflictError(context={"email": form.email})

        password_hash = await run_in_threadpool(ctx.hasher.hash, form.password)
        user = await ctx.store.create_user(
            name=form.name,
            username=form.username,
            email=form.email,
            age=form.age,
            password_hash=password_hash,
        )
    except PostboardError:
        raise
    except Exception as exc:
        logger.exception("Registration failed for %s", form.email)
        raise ServerError(context={"original_error": type(exc).__name__}) from exc

    token = ctx.tokens.issue(user.user_id, user.email)
    logger.info("Registered user %s (%s)", user.username, user.user_id)
    return HandlerResult.redirect(ctx.settings.post_register_redirect, credential=token)


async def login(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    """Verify email + password, issue a credential and go to the dashboard."""
    form = parse_form(LoginForm, request.form)

    try:
        user = await ctx.store.get_user_by_email(form.email)
        if user is None:
            raise NotFoundError(resource="user", message="User not registered")

        password_ok = await run_in_threadpool(
            ctx.hasher.verify, form.password, user.password_hash
        )
    except PostboardError:
        raise
    except Exception as exc:
        logger.exception("Login lookup failed for %s", form.email)
        raise ServerError(context={"original_error": type(exc).__name__}) from exc

    if not password_ok:
        logger.warning("Failed login for %s", form.email)
        raise NotAuthenticatedError("Invalid password. Try again!")

    token = ctx.tokens.issue(user.user_id, user.email)
    logger.info("Login: %s (%s)", user.username, user.user_id)
    return HandlerResult.redirect(DASHBOARD_PATH, credential=token)


async def logout(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    return HandlerResult.redirect(LOGIN_PATH, clear_credential=True)
