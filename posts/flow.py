"""
Post flow — dashboard listing and create / like / edit / delete.

Every handler here runs behind the session guard, so ``request.identity``
is always set. Ownership is decided by comparing the post's ``user_id``
with the identity's ``user_id`` (both ``uuid.UUID``).
"""

from __future__ import annotations

import logging
import uuid
from urllib.parse import urlsplit, urlunsplit

from core.context import AppContext
from core.exceptions import InvalidInputError, NotAuthorizedError, NotFoundError
from core.handler import HandlerRequest, HandlerResult
from database.models import Post

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"


def clean_content(raw: str, max_length: int) -> str:
    """Trim ``raw``; reject it if nothing is left or it is too long."""
    content = (raw or "").strip()
    if not content:
        raise InvalidInputError("Post content cannot be empty.", field="content")
    if len(content) > max_length:
        raise InvalidInputError(
            f"Post content cannot be longer than {max_length} characters.",
            field="content",
        )
    return content


def _post_id(request: HandlerRequest) -> uuid.UUID:
    raw = request.path_params.get("post_id", "")
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise NotFoundError(resource="post", resource_id=raw) from None


async def _load_post(ctx: AppContext, request: HandlerRequest) -> Post:
    post_id = _post_id(request)
    post = await ctx.store.get_post(post_id)
    if post is None:
        raise NotFoundError(resource="post", resource_id=str(post_id))
    return post


async def _load_owned_post(ctx: AppContext, request: HandlerRequest) -> Post:
    post = await _load_post(ctx, request)
    if post.user_id != request.identity.user_id:
        logger.warning(
            "User %s tried to modify post %s owned by %s",
            request.identity.user_id,
            post.post_id,
            post.user_id,
        )
        raise NotAuthorizedError(context={"post_id": str(post.post_id)})
    return post


def back_to_referer(request: HandlerRequest) -> str:
    """The referring page on this host, or the dashboard."""
    if not request.referer:
        return DASHBOARD_PATH
    parts = urlsplit(request.referer)
    if parts.scheme not in ("", "http", "https"):
        return DASHBOARD_PATH
    if parts.netloc and parts.netloc != request.host:
        return DASHBOARD_PATH
    if not parts.path.startswith("/"):
        return DASHBOARD_PATH
    # "//host" or "/\host" in Location is read by browsers as another site
    if parts.path.startswith("//") or "\\" in parts.path:
        return DASHBOARD_PATH
    return urlunsplit(("", "", parts.path, parts.query, ""))


# ── Handlers ───────────────────────────────────────────────────────────


async def dashboard(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    identity = request.identity
    user = await ctx.store.get_user(identity.user_id)
    if user is None:
        # valid credential for a user that no longer exists
        return HandlerResult.redirect(LOGIN_PATH, clear_credential=True)

    posts = await ctx.store.list_posts(user.user_id, viewer_id=identity.user_id)
    return HandlerResult.render("dashboard.html", user=user, posts=posts)


async def create_post(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    content = clean_content(request.form_value("content"), ctx.settings.post_max_length)

    owner = await ctx.store.get_user(request.identity.user_id)
    if owner is None:
        return HandlerResult.redirect(LOGIN_PATH, clear_credential=True)

    post = await ctx.store.create_post(owner.user_id, content)
    logger.info("User %s created post %s", owner.user_id, post.post_id)
    return HandlerResult.redirect(DASHBOARD_PATH)


async def toggle_like(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    """
    Unlike if the caller is in the likes set, like otherwise.

    Each branch is one conditional statement in the store: a delete that
    only matches the caller's row, then (if nothing was deleted) an insert
    that is a no-op when the row already exists.
    """
    post = await _load_post(ctx, request)
    user_id = request.identity.user_id

    if await ctx.store.remove_like(post.post_id, user_id):
        logger.info("User %s unliked post %s", user_id, post.post_id)
    else:
        await ctx.store.add_like(post.post_id, user_id)
        logger.info("User %s liked post %s", user_id, post.post_id)

    return HandlerResult.redirect(back_to_referer(request))


async def show_edit(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    post = await _load_owned_post(ctx, request)
    return HandlerResult.render("edit.html", post=post)


async def edit_post(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    post = await _load_owned_post(ctx, request)
    content = clean_content(request.form_value("content"), ctx.settings.post_max_length)

    if not await ctx.store.update_post_content(post.post_id, content):
        # deleted between the ownership check and the update
        raise NotFoundError(resource="post", resource_id=str(post.post_id))

    logger.info("User %s edited post %s", request.identity.user_id, post.post_id)
    return HandlerResult.redirect(DASHBOARD_PATH)


async def delete_post(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
    post = await _load_owned_post(ctx, request)
    await ctx.store.delete_post(post.post_id)
    logger.info("User %s deleted post %s", request.identity.user_id, post.post_id)
    return HandlerResult.redirect(DASHBOARD_PATH)
