"""
Test doubles for the ApiClient and CredentialStore ports.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional

from greenhero.domain.exceptions import CredentialStoreError
from greenhero.domain.models import ApiResponse
from greenhero.domain.ports import TOKEN_KEY, USER_KEY
from greenhero.infrastructure.storage.credential_store import InMemoryCredentialStore

USER_RECORD = {"_id": "u1", "email": "a@b.com", "first_name": "Mohamed", "last_name": "Rafik"}


@dataclass
class Call:
    method: str
    path: str
    json: Any = None
    token: Optional[str] = None
    data: Any = None
    files: Any = None


class FakeApi:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[Call] = []
        self.gate: Optional[asyncio.Event] = None

    def queue(self, *responses) -> "FakeApi":
        self.responses.extend(responses)
        return self

    async def request(self, method, path, *, json=None, token=None, data=None, files=None):
        self.calls.append(Call(method, path, json, token, data, files))
        if self.gate is not None:
            await self.gate.wait()
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FailingStore(InMemoryCredentialStore):
    """In-memory store whose selected operations raise CredentialStoreError."""

    def __init__(self, initial=None, *, fail_get=False, fail_get_keys=(), fail_set_keys=(), fail_delete=False):
        super().__init__(initial)
        self.fail_get = fail_get
        self.fail_get_keys = set(fail_get_keys)
        self.fail_set_keys = set(fail_set_keys)
        self.fail_delete = fail_delete

    async def get_item(self, key):
        if self.fail_get or key in self.fail_get_keys:
            raise CredentialStoreError("keychain locked")
        return await super().get_item(key)

    async def set_item(self, key, value):
        if key in self.fail_set_keys:
            raise CredentialStoreError("disk full")
        await super().set_item(key, value)

    async def delete_item(self, key):
        if self.fail_delete:
            raise CredentialStoreError("keychain locked")
        await super().delete_item(key)


def ok(body: Any = None, status: int = 200) -> ApiResponse:
    return ApiResponse(status=status, body={} if body is None else body)


def fail(status: int, body: Any = None) -> ApiResponse:
    return ApiResponse(status=status, body={} if body is None else body)


def login_ok(token: str = "t1", user: Optional[dict] = None) -> ApiResponse:
    return ok({"token": token, "user": user or dict(USER_RECORD)})


def stored_session(token: str = "t1", user: Optional[dict] = None) -> dict[str, str]:
    return {TOKEN_KEY: token, USER_KEY: json.dumps(user or USER_RECORD)}
