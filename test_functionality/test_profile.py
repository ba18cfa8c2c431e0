"""
Test ProfileService: prefill, update and session refresh.
"""
import asyncio
import json

import pytest

from fakes import USER_RECORD, fail, ok, stored_session
from greenhero.application.services.profile import ProfileService
from greenhero.application.services.session import SessionManager
from greenhero.domain.exceptions import ApiError, InvalidRequestError, NotAuthenticatedError
from greenhero.domain.ports import USER_KEY
from greenhero.infrastructure.storage.credential_store import InMemoryCredentialStore


@pytest.fixture
def logged_in(api):
    store = InMemoryCredentialStore(stored_session("t1"))
    session = SessionManager(api, store)
    asyncio.run(session.bootstrap())
    return session, store


def test_current_form_prefills_from_user(logged_in):
    session, _ = logged_in

    form = ProfileService(session).current_form()

    assert form["first_name"] == "Mohamed"
    assert form["email"] == "a@b.com"
    assert form["bio"] == ""


def test_update_profile_uses_server_user(logged_in, api):
    session, store = logged_in
    api.queue(ok({"user": dict(USER_RECORD, bio="Gardener", location="Oran")}))
    service = ProfileService(session)
    form = dict(service.current_form(), bio="Gardener")

    user = asyncio.run(service.update_profile(form))

    assert user.location == "Oran"
    assert session.user.bio == "Gardener"
    call = api.calls[0]
    assert (call.method, call.path, call.token) == ("PUT", "/users/u1", "t1")
    assert call.json["bio"] == "Gardener"
    # stored copy untouched unless persistence is requested
    assert "bio" not in json.loads(store.entries[USER_KEY])


def test_update_profile_merges_when_server_sends_no_user(logged_in, api):
    session, store = logged_in
    api.queue(ok({"msg": "updated"}))
    service = ProfileService(session, persist_user=True)

    asyncio.run(service.update_profile(dict(service.current_form(), last_name="Benali")))

    assert session.user.last_name == "Benali"
    assert session.user.id == "u1"
    assert json.loads(store.entries[USER_KEY])["last_name"] == "Benali"


def test_update_profile_rejects_blank_name(logged_in, api):
    session, _ = logged_in
    service = ProfileService(session)

    with pytest.raises(InvalidRequestError, match="first_name"):
        asyncio.run(service.update_profile(dict(service.current_form(), first_name="  ")))
    assert api.calls == []


def test_update_profile_rejected(logged_in, api):
    session, _ = logged_in
    api.queue(fail(400, {"msg": "Email taken"}))
    service = ProfileService(session)

    with pytest.raises(ApiError, match="Email taken"):
        asyncio.run(service.update_profile(service.current_form()))
    assert session.user.email == "a@b.com"


def test_profile_requires_login(session):
    asyncio.run(session.bootstrap())

    with pytest.raises(NotAuthenticatedError):
        ProfileService(session).current_form()
