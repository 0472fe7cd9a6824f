"""
Tests for session token signing and verification.
"""

import uuid

import pytest

from auth.tokens import TokenService
from core.exceptions import NotAuthenticatedError


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenService:
    def setup_method(self):
        self.clock = _Clock()
        self.tokens = TokenService("s3cret", expiry_seconds=3600, clock=self.clock)
        self.user_id = uuid.uuid4()

    def test_round_trip_carries_identity(self):
        token = self.tokens.issue(self.user_id, "a@example.com")
        identity = self.tokens.verify(token)
        assert identity.user_id == self.user_id
        assert identity.email == "a@example.com"

    def test_token_is_cookie_safe(self):
        token = self.tokens.issue(self.user_id, "a@example.com")
        assert "=" not in token
        assert "+" not in token and "/" not in token

    def test_accepted_at_59_minutes(self):
        token = self.tokens.issue(self.user_id, "a@example.com")
        self.clock.now += 59 * 60
        assert self.tokens.verify(token).user_id == self.user_id

    def test_rejected_at_61_minutes(self):
        token = self.tokens.issue(self.user_id, "a@example.com")
        self.clock.now += 61 * 60
        with pytest.raises(NotAuthenticatedError) as exc:
            self.tokens.verify(token)
        assert "expired" in exc.value.context["reason"]

    def test_tampered_signature_rejected(self):
        token = self.tokens.issue(self.user_id, "a@example.com")
        body, sig = token.split(".")
        forged = body + "." + ("0" if sig[0] != "0" else "1") + sig[1:]
        with pytest.raises(NotAuthenticatedError):
            self.tokens.verify(forged)

    def test_tampered_payload_rejected(self):
        token = self.tokens.issue(self.user_id, "a@example.com")
        other = self.tokens.issue(uuid.uuid4(), "b@example.com")
        forged = other.split(".")[0] + "." + token.split(".")[1]
        with pytest.raises(NotAuthenticatedError):
            self.tokens.verify(forged)

    def test_other_secret_rejected(self):
        stranger = TokenService("different", clock=self.clock)
        token = stranger.issue(self.user_id, "a@example.com")
        with pytest.raises(NotAuthenticatedError):
            self.tokens.verify(token)

    @pytest.mark.parametrize("garbage", ["", "nodot", "a.b", "!!!.###", "e30.deadbeef"])
    def test_garbage_rejected(self, garbage):
        with pytest.raises(NotAuthenticatedError):
            self.tokens.verify(garbage)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            TokenService("")
