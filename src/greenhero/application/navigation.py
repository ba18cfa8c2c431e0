"""
application.navigation - Route decision between the auth and main groups.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from greenhero.domain.models import Route, SessionSnapshot


class RouteGroup(str, Enum):
    """Where the caller currently is."""
    AUTH = "(auth)"
    TABS = "(tabs)"


def decide_route(snapshot: SessionSnapshot, current: RouteGroup) -> Optional[Route]:
    """Return where to redirect, or None to stay.

    No decision is made while the session is loading.
    """
    if snapshot.loading:
        return None
    if not snapshot.is_authenticated and current != RouteGroup.AUTH:
        return Route.LOGIN
    if snapshot.is_authenticated and current == RouteGroup.AUTH:
        return Route.HOME
    return None
