"""
Test FileCredentialStore and InMemoryCredentialStore.
"""
import asyncio
import json
import os
import stat
import sys

import pytest

from greenhero.domain.exceptions import CredentialStoreError
from greenhero.domain.ports import TOKEN_KEY, USER_KEY, CredentialStore
from greenhero.infrastructure.storage.credential_store import (
    FileCredentialStore,
    InMemoryCredentialStore,
)


def test_stores_satisfy_the_port(tmp_path):
    assert isinstance(FileCredentialStore(tmp_path / "c.json"), CredentialStore)
    assert isinstance(InMemoryCredentialStore(), CredentialStore)


def test_missing_file_reads_as_empty(tmp_path):
    store = FileCredentialStore(tmp_path / "nested" / "credentials.json")

    assert asyncio.run(store.get_item(TOKEN_KEY)) is None
    asyncio.run(store.delete_item(TOKEN_KEY))
    assert not store.path.exists()


def test_set_get_delete(tmp_path):
    store = FileCredentialStore(tmp_path / "nested" / "credentials.json")

    async def scenario():
        await store.set_item(TOKEN_KEY, "t1")
        await store.set_item(USER_KEY, '{"_id": "u1"}')
        await store.delete_item(TOKEN_KEY)
        return await store.get_item(TOKEN_KEY), await store.get_item(USER_KEY)

    token, user = asyncio.run(scenario())

    assert token is None
    assert user == '{"_id": "u1"}'
    assert json.loads(store.path.read_text()) == {USER_KEY: '{"_id": "u1"}'}


def test_values_survive_a_new_instance(tmp_path):
    path = tmp_path / "credentials.json"
    asyncio.run(FileCredentialStore(path).set_item(TOKEN_KEY, "t1"))

    assert asyncio.run(FileCredentialStore(path).get_item(TOKEN_KEY)) == "t1"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_file_is_private(tmp_path):
    store = FileCredentialStore(tmp_path / "credentials.json")

    asyncio.run(store.set_item(TOKEN_KEY, "t1"))

    assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600
    assert [p.name for p in tmp_path.iterdir()] == ["credentials.json"]


@pytest.mark.parametrize("content", ["{broken", "[1, 2, 3]"])
def test_corrupt_file_reads_as_empty_and_is_overwritten(tmp_path, content):
    path = tmp_path / "credentials.json"
    path.write_text(content)
    store = FileCredentialStore(path)

    assert asyncio.run(store.get_item(TOKEN_KEY)) is None
    asyncio.run(store.set_item(TOKEN_KEY, "t2"))
    assert json.loads(path.read_text()) == {TOKEN_KEY: "t2"}


def test_non_string_value_is_ignored(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps({TOKEN_KEY: 42}))

    assert asyncio.run(FileCredentialStore(path).get_item(TOKEN_KEY)) is None


def test_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    store = FileCredentialStore(blocker / "credentials.json")

    with pytest.raises(CredentialStoreError):
        asyncio.run(store.set_item(TOKEN_KEY, "t1"))


def test_in_memory_store():
    store = InMemoryCredentialStore({TOKEN_KEY: "t1"})

    async def scenario():
        await store.set_item(USER_KEY, "{}")
        await store.delete_item(TOKEN_KEY)
        await store.delete_item("missing")
        return await store.get_item(TOKEN_KEY)

    assert asyncio.run(scenario()) is None
    assert store.entries == {USER_KEY: "{}"}
