"""
Session guard — the single authorization boundary for protected routes.

The guard is an ordered pipeline of named gates. Each gate looks at the
``HandlerRequest`` and either lets it through (possibly with identity
attached) or stops it with an error. Handlers behind the guard only ever
read identity from ``request.identity``.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, NamedTuple, Optional, Sequence

from core.context import AppContext
from core.exceptions import NotAuthenticatedError, PostboardError
from core.handler import HandlerRequest, HandlerResult

logger = logging.getLogger(__name__)

REDIRECT = "redirect"
REJECT = "reject"

LOGIN_PATH = "/login"

Handler = Callable[[AppContext, HandlerRequest], Awaitable[HandlerResult]]


@dataclass(frozen=True)
class GateOutcome:
    request: HandlerRequest
    error: Optional[PostboardError] = None

    @property
    def proceeds(self) -> bool:
        return self.error is None

    @classmethod
    def proceed(cls, request: HandlerRequest) -> "GateOutcome":
        return cls(request=request)

    @classmethod
    def halt(cls, request: HandlerRequest, error: PostboardError) -> "GateOutcome":
        return cls(request=request, error=error)


class Gate(NamedTuple):
    name: str
    check: Callable[[AppContext, HandlerRequest], GateOutcome]


def credential_present(ctx: AppContext, request: HandlerRequest) -> GateOutcome:
    if not request.credential:
        return GateOutcome.halt(request, NotAuthenticatedError("Please log in first."))
    return GateOutcome.proceed(request)


def credential_valid(ctx: AppContext, request: HandlerRequest) -> GateOutcome:
    try:
        identity = ctx.tokens.verify(request.credential or "")
    except NotAuthenticatedError as exc:
        return GateOutcome.halt(request, exc)
    return GateOutcome.proceed(request.with_identity(identity))


DEFAULT_GATES: Sequence[Gate] = (
    Gate("credential_present", credential_present),
    Gate("credential_valid", credential_valid),
)


class SessionGuard:
    """
    Runs the gates in order and applies the route policy on failure.

    ``redirect`` sends the caller to the login page and drops any stale
    cookie; ``reject`` raises the ``NotAuthenticatedError`` so the error
    handler answers 401.
    """

    def __init__(self, gates: Sequence[Gate] = DEFAULT_GATES, policy: str = REDIRECT):
        if policy not in (REDIRECT, REJECT):
            raise ValueError(f"unknown guard policy {policy!r}")
        self.gates = tuple(gates)
        self.policy = policy

    def check(self, ctx: AppContext, request: HandlerRequest) -> GateOutcome:
        outcome = GateOutcome.proceed(request)
        for gate in self.gates:
            outcome = gate.check(ctx, outcome.request)
            if not outcome.proceeds:
                logger.debug(
                    "Gate %s stopped request: %s", gate.name, outcome.error.message
                )
                return outcome
        return outcome

    def protect(self, handler: Handler) -> Handler:
        """Wrap ``handler`` so it only runs for requests that pass every gate."""

        @functools.wraps(handler)
        async def guarded(ctx: AppContext, request: HandlerRequest) -> HandlerResult:
            outcome = self.check(ctx, request)
            if outcome.proceeds:
                return await handler(ctx, outcome.request)
            if self.policy == REJECT:
                raise outcome.error
            return HandlerResult.redirect(
                LOGIN_PATH, clear_credential=bool(request.credential)
            )

        return guarded
