"""
domain.exceptions - Custom exception hierarchy for the GreenHero client.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed. Every error carries a short
``title`` that adapters show next to the message.
"""

from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    title = "Error"

    @property
    def message(self) -> str:
        return str(self)


# ---------------------------------------------------------------------------
# Transport: no response reached the client
# ---------------------------------------------------------------------------

class TransportError(DomainError):
    """Raised when a request never got a response (server unreachable)."""

    title = "Error"

    def __init__(
        self,
        message: str = "Server not reachable",
        *,
        url: str = "",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.url = url
        self.cause = cause


class RequestTimeoutError(TransportError):
    """Raised when the server did not answer within the configured timeout."""


# ---------------------------------------------------------------------------
# Application rejection: a response arrived with a non-success status
# ---------------------------------------------------------------------------

class ApiError(DomainError):
    """Raised when the backend answered but rejected the request."""

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        body: Optional[Any] = None,
    ):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthenticationError(ApiError):
    """Raised when login is rejected or returns an unusable payload."""

    title = "Login failed"


class SignupError(ApiError):
    """Raised when the backend refuses a registration."""

    title = "Signup failed"


class SessionExpiredError(ApiError):
    """Raised when an authenticated call came back 401 and the session was dropped."""

    title = "Session expired"


class ClassificationError(ApiError):
    """Raised when the waste classifier cannot analyze an image."""


# ---------------------------------------------------------------------------
# Local errors
# ---------------------------------------------------------------------------

class NotAuthenticatedError(DomainError):
    """Raised when an authenticated operation is attempted without a token."""

    title = "Not logged in"


class SessionBusyError(DomainError):
    """Raised when a login overlaps another login or is superseded by logout."""


class InvalidRequestError(DomainError):
    """Raised when a request body fails validation before being sent."""

    title = "Missing Fields"


class CredentialStoreError(DomainError):
    """Raised when the persistent credential store cannot be read or written."""
