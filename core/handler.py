"""
Transport-independent request and result types.

Flows take a ``HandlerRequest`` and return a ``HandlerResult``; only
``api/`` knows about FastAPI. This keeps every decision in the flows
testable without an HTTP client.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Identity:
    """Who the verified credential says the caller is."""

    user_id: uuid.UUID
    email: str


@dataclass(frozen=True)
class HandlerRequest:
    identity: Optional[Identity] = None
    credential: Optional[str] = None
    path_params: Dict[str, str] = field(default_factory=dict)
    form: Dict[str, str] = field(default_factory=dict)
    referer: Optional[str] = None
    host: Optional[str] = None

    def with_identity(self, identity: Identity) -> "HandlerRequest":
        return replace(self, identity=identity)

    def form_value(self, name: str, default: str = "") -> str:
        return self.form.get(name, default)


@dataclass
class HandlerResult:
    """
    What the transport should send back.

    Exactly one of ``template`` or ``redirect_to`` is set. ``credential``
    asks the transport to set the session cookie; ``clear_credential`` asks
    it to drop it.
    """

    status: int = 200
    template: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    redirect_to: Optional[str] = None
    credential: Optional[str] = None
    clear_credential: bool = False

    @classmethod
    def render(cls, template: str, status: int = 200, **context: Any) -> "HandlerResult":
        return cls(status=status, template=template, context=context)

    @classmethod
    def redirect(
        cls,
        location: str,
        credential: Optional[str] = None,
        clear_credential: bool = False,
    ) -> "HandlerResult":
        return cls(
            status=303,
            redirect_to=location,
            credential=credential,
            clear_credential=clear_credential,
        )
