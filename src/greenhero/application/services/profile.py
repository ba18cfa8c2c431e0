"""
application.services.profile - Edit the logged-in user's profile.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from greenhero.domain.entities import User
from greenhero.domain.exceptions import ApiError, NotAuthenticatedError
from greenhero.application.dto import ProfileUpdate, parse_form
from greenhero.application.services.session import SessionManager

logger = logging.getLogger(__name__)


class ProfileService:
    """Push profile edits to the backend and refresh the session's user."""

    def __init__(self, session: SessionManager, persist_user: bool = False):
        self._session = session
        self._persist_user = persist_user

    def current_form(self) -> dict[str, str]:
        """Profile fields of the session user, as an edit form would prefill them."""
        user = self._require_user()
        return {
            name: getattr(user, name)
            for name in ProfileUpdate.model_fields
        }

    async def update_profile(self, update: Union[ProfileUpdate, Mapping[str, Any]]) -> User:
        """PUT /users/:id, then replace the session user.

        The server's ``user`` is preferred; when it sends none, the local
        record merged with the edit is used.

        Raises:
            InvalidRequestError:   Name or email left empty, or unknown fields.
            NotAuthenticatedError: No logged-in user.
            ApiError:              Backend rejected the update.
        """
        if not isinstance(update, ProfileUpdate):
            update = parse_form(ProfileUpdate, update)
        user = self._require_user()

        changes = update.model_dump()
        response = await self._session.authorized_request(
            "PUT", f"/users/{user.id}", json=changes,
        )
        if not response.ok:
            raise ApiError(
                response.message("msg", "message"),
                status=response.status,
                body=response.body,
            )

        server_user = response.get("user")
        if isinstance(server_user, dict):
            updated = User.from_dict(server_user)
        else:
            updated = user.merged(changes)

        logger.info("Profile updated for user %s", updated.id)
        return await self._session.update_user(updated, persist=self._persist_user)

    def _require_user(self) -> User:
        user = self._session.user
        if user is None or self._session.token is None:
            raise NotAuthenticatedError("Log in to edit your profile.")
        return user
