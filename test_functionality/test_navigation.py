"""
Test the route gate between the auth group and the main tabs.
"""
import pytest

from greenhero.application.navigation import RouteGroup, decide_route
from greenhero.domain.entities import User
from greenhero.domain.models import Route, SessionSnapshot, SessionState


def _snapshot(state, loading=False, token=None, user=None):
    return SessionSnapshot(user=user, token=token, loading=loading, state=state)


AUTHENTICATED = _snapshot(SessionState.AUTHENTICATED, token="t1", user=User(id="u1"))
ANONYMOUS = _snapshot(SessionState.UNAUTHENTICATED)


@pytest.mark.parametrize("snapshot, group, expected", [
    (ANONYMOUS, RouteGroup.TABS, Route.LOGIN),
    (ANONYMOUS, RouteGroup.AUTH, None),
    (AUTHENTICATED, RouteGroup.AUTH, Route.HOME),
    (AUTHENTICATED, RouteGroup.TABS, None),
])
def test_decide_route(snapshot, group, expected):
    assert decide_route(snapshot, group) == expected


@pytest.mark.parametrize("group", list(RouteGroup))
def test_no_decision_while_loading(group):
    snapshot = _snapshot(SessionState.BOOTSTRAPPING, loading=True)

    assert decide_route(snapshot, group) is None


def test_token_without_user_counts_as_logged_in():
    snapshot = _snapshot(SessionState.AUTHENTICATED, token="t1")

    assert decide_route(snapshot, RouteGroup.TABS) is None
    assert decide_route(snapshot, RouteGroup.AUTH) == Route.HOME
