"""
Session token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256:
``<payload>.<hex signature>``. The payload carries ``user_id``, ``email``,
``iat`` and ``exp``. Nothing is stored server-side.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import uuid
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable

from core.exceptions import NotAuthenticatedError
from core.handler import Identity


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(data: str) -> bytes:
    return urlsafe_b64decode(data + "=" * (-len(data) % 4))


class TokenService:
    """Signs and verifies compact, expiring identity tokens."""

    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: uuid.UUID | str, email: str) -> str:
        """Create a signed token binding ``user_id`` and ``email``."""
        now = int(self._clock())
        payload = {
            "user_id": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return _b64encode(raw) + "." + self._sign(raw)

    def verify(self, token: str) -> Identity:
        """
        Verify token and return the identity it carries.

        Raises ``NotAuthenticatedError`` on malformed, tampered or expired
        tokens.
        """
        try:
            body, sig = token.split(".", 1)
            raw = _b64decode(body)
            if not hmac.compare_digest(sig, self._sign(raw)):
                raise ValueError("bad signature")
            payload = json.loads(raw)
            if int(payload.get("exp", 0)) <= self._clock():
                raise ValueError("token expired")
            return Identity(
                user_id=uuid.UUID(payload["user_id"]),
                email=payload["email"],
            )
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise NotAuthenticatedError(
                "Invalid or expired token.",
                context={"reason": str(exc)},
            ) from exc
