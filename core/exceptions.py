"""
Application exception hierarchy.

Flows raise these; the HTTP layer maps each one to a status code and an
error page (see ``api/errors.py``).

    PostboardError
    ├── InvalidInputError       → 400
    ├── NotAuthenticatedError   → 401
    ├── NotAuthorizedError      → 403
    ├── NotFoundError           → 404
    ├── ConflictError           → 409
    └── ServerError             → 500 (generic message, details logged only)

``ConfigurationError`` is separate: it is raised at startup and never
reaches a request.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PostboardError(Exception):
    """Base for every error a request handler may surface."""

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        # logged, never rendered
        self.context = context or {}
        super().__init__(self.message)


class InvalidInputError(PostboardError):
    status_code = 400

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotAuthenticatedError(PostboardError):
    """Missing, invalid or expired credential, or a failed password check."""

    status_code = 401

    def __init__(
        self,
        message: str = "Please log in first.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotAuthorizedError(PostboardError):
    """Authenticated, but not the owner of the resource."""

    status_code = 403

    def __init__(
        self,
        message: str = "You are not allowed to modify this resource.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PostboardError):
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource.capitalize()} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(PostboardError):
    status_code = 409

    def __init__(
        self,
        message: str = "User already registered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServerError(PostboardError):
    """
    Unexpected store or crypto failure.

    The message shown to the caller is always the generic one; whatever
    went wrong goes into ``context`` and the log.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(RuntimeError):
    """Raised at startup when a required setting is missing or invalid."""
