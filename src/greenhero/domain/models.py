"""
domain.models - Value objects shared by services and adapters.

These are immutable data containers with no I/O: HTTP responses as the
services see them, session snapshots handed to observers, and the
user-facing results of feature operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from greenhero.domain.entities import User

GENERIC_FAILURE = "Something went wrong"


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ApiResponse:
    """A response that reached the client, whatever its status.

    ``body`` is the decoded JSON document, or ``{}`` when the payload was
    not JSON (the raw payload is kept in ``text``).
    """
    status: int
    body: Any = field(default_factory=dict)
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def get(self, key: str, default: Any = None) -> Any:
        """Read a top-level key from an object body; lists and scalars have none."""
        if isinstance(self.body, dict):
            return self.body.get(key, default)
        return default

    def message(self, *keys: str, default: str = GENERIC_FAILURE) -> str:
        """Pick the first server-provided message among ``keys``.

        The special key ``"errors"`` reads the ``msg`` of the first entry in
        a validation-error array (``{"errors": [{"msg": ...}, ...]}``).
        """
        for key in keys or ("message", "msg", "error"):
            if key == "errors":
                errors = self.get("errors")
                if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                    value = errors[0].get("msg")
                else:
                    value = None
            else:
                value = self.get(key)
            if isinstance(value, str) and value:
                return value
        return default


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class SessionState(str, Enum):
    """Authentication state machine of a client session."""
    BOOTSTRAPPING = "bootstrapping"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class Route(str, Enum):
    """Top-level navigation groups."""
    HOME = "/(tabs)"
    LOGIN = "/(auth)/login"


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time copy of session state, handed to observers."""
    user: Optional[User]
    token: Optional[str]
    loading: bool
    state: SessionState

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED


@dataclass(frozen=True)
class Notice:
    """User-visible outcome of a successful operation."""
    title: str
    message: str
    route: Optional[Route] = None


# ---------------------------------------------------------------------------
# AI endpoints
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChatReply:
    """Assistant answer. ``ok`` is False when ``text`` is a canned fallback."""
    text: str
    ok: bool = True


@dataclass(frozen=True)
class WasteClassification:
    """Classifier verdict for one photographed item."""
    label: str
    suggestions: list[str] = field(default_factory=list)
    recycle_steps: list[str] = field(default_factory=list)
    location: str = ""
