"""
Application context — the explicitly constructed bundle of collaborators
every handler receives.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.password import PasswordHasher
from auth.tokens import TokenService
from config.settings import Settings
from database.store import PostStore


@dataclass
class AppContext:
    settings: Settings
    store: PostStore
    hasher: PasswordHasher
    tokens: TokenService


def build_context(settings: Settings) -> AppContext:
    """Validate ``settings`` and wire up store, hasher and token service."""
    settings.validate_required()
    return AppContext(
        settings=settings,
        store=PostStore.from_url(settings.database_url, echo=settings.db_echo),
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenService(settings.jwt_secret, expiry_seconds=settings.jwt_expiry_seconds),
    )
