"""
Credential store — persistence for users, posts and likes.

Every public method opens its own session and transaction, so each call
is atomic from the caller's point of view. Like membership is changed
only through single conditional statements (``DELETE ... WHERE`` and
``INSERT ... ON CONFLICT DO NOTHING``); nothing here reads a likes list
and writes it back.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.exceptions import ConflictError, NotFoundError
from database.models import Base, Post, PostLike, User
from database.session import build_session_factory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostSummary:
    post_id: uuid.UUID
    content: str
    created_at: datetime
    like_count: int
    liked_by_viewer: bool


class PostStore:
    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.engine = engine
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "PostStore":
        engine, factory = build_session_factory(database_url, echo=echo)
        return cls(engine, factory)

    # ── lifecycle ────────────────────────────────────────────────────────

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    def _insert(self, table):
        if self.engine.dialect.name == "sqlite":
            return sqlite_insert(table)
        return pg_insert(table)

    # ── users ────────────────────────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def create_user(
        self,
        *,
        name: str,
        username: str,
        email: str,
        age: int,
        password_hash: str,
    ) -> User:
        """
        Insert a user in one transaction.

        A unique-constraint violation (email or username taken by a
        concurrent registration) is reported as ``ConflictError``.
        """
        user = User(
            user_id=uuid.uuid4(),
            name=name,
            username=username,
            email=email,
            age=age,
            password_hash=password_hash,
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(user)
        except IntegrityError as exc:
            logger.info("Duplicate registration rejected for %s", email)
            raise ConflictError(context={"email": email}) from exc
        return user

    # ── posts ────────────────────────────────────────────────────────────

    async def create_post(
        self,
        owner_id: uuid.UUID,
        content: str,
        created_at: Optional[datetime] = None,
    ) -> Post:
        post = Post(post_id=uuid.uuid4(), user_id=owner_id, content=content)
        if created_at is not None:
            post.created_at = created_at
        try:
            async with self._session_factory() as session, session.begin():
                session.add(post)
        except IntegrityError as exc:
            # owner removed after the caller looked it up
            raise NotFoundError(resource="user", resource_id=str(owner_id)) from exc
        return post

    async def get_post(self, post_id: uuid.UUID) -> Optional[Post]:
        async with self._session_factory() as session:
            return await session.get(Post, post_id)

    async def update_post_content(self, post_id: uuid.UUID, content: str) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                update(Post).where(Post.post_id == post_id).values(content=content)
            )
            return result.rowcount == 1

    async def delete_post(self, post_id: uuid.UUID) -> bool:
        async with self._session_factory() as session, session.begin():
            await session.execute(delete(PostLike).where(PostLike.post_id == post_id))
            result = await session.execute(delete(Post).where(Post.post_id == post_id))
            return result.rowcount == 1

    async def list_posts(
        self,
        owner_id: uuid.UUID,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> List[PostSummary]:
        """Posts owned by ``owner_id``, newest first, with like counts."""
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    select(Post, func.count(PostLike.user_id))
                    .outerjoin(PostLike, PostLike.post_id == Post.post_id)
                    .where(Post.user_id == owner_id)
                    .group_by(Post.post_id)
                    .order_by(Post.created_at.desc())
                )
            ).all()

            liked: Set[uuid.UUID] = set()
            if viewer_id is not None and rows:
                liked = set(
                    (
                        await session.execute(
                            select(PostLike.post_id).where(
                                PostLike.user_id == viewer_id,
                                PostLike.post_id.in_([post.post_id for post, _ in rows]),
                            )
                        )
                    ).scalars()
                )

        return [
            PostSummary(
                post_id=post.post_id,
                content=post.content,
                created_at=post.created_at,
                like_count=count,
                liked_by_viewer=post.post_id in liked,
            )
            for post, count in rows
        ]

    # ── likes ────────────────────────────────────────────────────────────

    async def add_like(self, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Add ``user_id`` to the likes set if absent. True if a row was added."""
        stmt = (
            self._insert(PostLike)
            .values(post_id=post_id, user_id=user_id)
            .on_conflict_do_nothing(index_elements=["post_id", "user_id"])
            .returning(PostLike.post_id)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return result.first() is not None
        except IntegrityError as exc:
            # post (or liker) deleted since the caller loaded it
            raise NotFoundError(resource="post", resource_id=str(post_id)) from exc

    async def remove_like(self, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Remove ``user_id`` from the likes set if present. True if a row went."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(PostLike).where(
                    PostLike.post_id == post_id,
                    PostLike.user_id == user_id,
                )
            )
            return result.rowcount == 1

    # ── inspection ───────────────────────────────────────────────────────
    # Read-only helpers for tests and ad-hoc checks; flows use list_posts.

    async def like_count(self, post_id: uuid.UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
            )
            return result.scalar_one()

    async def likers(self, post_id: uuid.UUID) -> Set[uuid.UUID]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PostLike.user_id).where(PostLike.post_id == post_id)
            )
            return set(result.scalars())
