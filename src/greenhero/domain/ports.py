"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the client needs without specifying HOW. Infrastructure
modules provide concrete implementations. Application services depend only
on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from greenhero.domain.models import ApiResponse

# (form field, (filename, content, mime type)): the multipart shape requests expects
FilePart = tuple[str, tuple[str, bytes, str]]

# Fixed keys of the two credential slots
TOKEN_KEY = "token"
USER_KEY = "user"


@runtime_checkable
class CredentialStore(Protocol):
    """Secure key/value storage that survives process restarts.

    Values are strings. A missing key reads as None; deleting a missing
    key is not an error.
    """

    async def get_item(self, key: str) -> Optional[str]: ...
    async def set_item(self, key: str, value: str) -> None: ...
    async def delete_item(self, key: str) -> None: ...


@runtime_checkable
class ApiClient(Protocol):
    """Issue one HTTP request and return whatever the server answered.

    Never raises on a non-2xx status. Raises TransportError only when no
    response was received.
    """

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        token: Optional[str] = None,
        data: Optional[Mapping[str, str]] = None,
        files: Optional[Sequence[FilePart]] = None,
    ) -> ApiResponse: ...
