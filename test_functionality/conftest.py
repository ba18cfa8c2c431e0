"""
Shared pytest fixtures.

src/ is put on sys.path so the suite also runs from a plain checkout.
"""
import os
import sys

src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import pytest

from fakes import FakeApi
from greenhero.application.services.session import SessionManager
from greenhero.infrastructure.storage.credential_store import InMemoryCredentialStore


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def session(api, store):
    return SessionManager(api, store)
