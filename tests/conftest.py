"""
Shared fixtures: an isolated SQLite store per test, an application
context around it, and HTTP clients talking to the app over ASGI.
"""

import os

# Before any project import: main.py builds a module-level app from the
# environment, and that must not point at a real database.
os.environ.setdefault("JWT_SECRET", "test-secret-not-real")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from core.context import build_context

DEFAULT_PASSWORD = "correct horse battery staple"


@pytest.fixture
def settings(tmp_path):
    # file database: one connection per session
    return Settings(
        _env_file=None,
        jwt_secret="test-secret-not-real",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'postboard.db'}",
        bcrypt_rounds=4,
        auto_create_tables=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def ctx(settings):
    context = build_context(settings)
    await context.store.create_tables()
    yield context
    await context.store.dispose()


@pytest.fixture
def app(ctx):
    from main import create_app

    return create_app(context=ctx)


@pytest_asyncio.fixture
async def make_client(app):
    """Factory for independent clients (separate cookie jars) on one app."""
    clients = []

    async def _make(**kwargs) -> AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        client = AsyncClient(
            transport=transport,
            base_url="http://test",
            follow_redirects=False,
            **kwargs,
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def client(make_client):
    return await make_client()


async def register_user(
    client: AsyncClient,
    *,
    name: str = "Alice",
    username: str = "alice",
    email: str = "alice@example.com",
    age: int = 30,
    password: str = DEFAULT_PASSWORD,
):
    return await client.post(
        "/register",
        data={
            "name": name,
            "username": username,
            "email": email,
            "age": str(age),
            "password": password,
        },
    )


async def login_user(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD):
    return await client.post("/login", data={"email": email, "password": password})
