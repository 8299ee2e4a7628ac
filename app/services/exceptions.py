"""Service-layer errors, mapped to HTTP responses by the handlers in app.main."""
from typing import Any, Optional


class ServiceError(Exception):
    """Base class for errors raised by the list, comment and auth services."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class Unauthorized(ServiceError):
    """No session, or the session doesn't resolve to an active user."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class InvalidRequest(ServiceError):
    """A required field is missing or a value is malformed."""

    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    """Raised when a unique identity (email, username) is already taken."""

    status_code = 409


class InternalError(ServiceError):
    """
    Store or unexpected failure.

    The message is safe to show to users; ``cause`` holds the underlying
    exception and is only logged server-side.
    """

    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)
