"""
application.services.chat - Chat sessions and the eco assistant.

Two backends are involved:
    - the GreenHero API stores the user's chat sessions (authenticated);
    - the external AI service produces replies (unauthenticated, absolute URL).

Assistant failures never raise: the user sees a short canned reply and
the conversation goes on, exactly like an assistant that is "thinking".
"""

from __future__ import annotations

import logging

from greenhero.domain.entities import ChatSession
from greenhero.domain.exceptions import ApiError, InvalidRequestError, TransportError
from greenhero.domain.models import ChatReply, Notice
from greenhero.domain.ports import ApiClient
from greenhero.application.services.session import SessionManager

logger = logging.getLogger(__name__)

EMPTY_MESSAGE_REPLY = "I didn't catch that. Could you repeat it?"
ASSISTANT_ERROR_REPLY = "The AI assistant is having trouble thinking right now."
CONNECTION_ERROR_REPLY = (
    "Connection error. Please ensure the assistant service is running and reachable."
)


class ChatService:
    """Manage stored chat sessions and talk to the AI assistant."""

    def __init__(self, session: SessionManager, api: ApiClient, chat_url: str):
        self._session = session
        self._api = api
        self._chat_url = chat_url

    # ------------------------------------------------------------------
    # Stored sessions
    # ------------------------------------------------------------------

    async def list_sessions(self) -> list[ChatSession]:
        response = await self._session.authorized_request("GET", "/chatsessions")
        if not response.ok:
            raise ApiError(
                response.message("msg", "message", default="Failed to load chats"),
                status=response.status,
                body=response.body,
            )
        records = response.get("ChatSessions") or []
        sessions = []
        for record in records if isinstance(records, list) else []:
            try:
                sessions.append(ChatSession.from_dict(record))
            except ValueError as e:
                logger.warning("Skipping unreadable chat session: %s", e)
        return sessions

    async def create_session(self, first_message: str) -> ChatSession:
        """Open a new session seeded with the user's first message."""
        first_message = first_message.strip()
        if not first_message:
            raise InvalidRequestError("Type a message to start a chat.")

        response = await self._session.authorized_request(
            "POST", "/chatsessions", json={"msg": first_message},
        )
        if not response.ok:
            raise ApiError(
                response.message("msg", default="Failed to create session"),
                status=response.status,
                body=response.body,
            )
        try:
            created = ChatSession.from_dict(response.get("newSession"))
        except ValueError as e:
            raise ApiError(
                f"Unreadable chat session: {e}",
                status=response.status,
                body=response.body,
            ) from e
        if not created.title:
            created.title = first_message
        logger.info("Created chat session %s", created.id)
        return created

    async def delete_session(self, session_id: str) -> Notice:
        response = await self._session.authorized_request(
            "DELETE", f"/chatsessions/{session_id}",
        )
        if not response.ok:
            raise ApiError(
                response.message("msg", default="Failed to delete"),
                status=response.status,
                body=response.body,
            )
        logger.info("Deleted chat session %s", session_id)
        return Notice(title="Deleted", message="Chat session removed.")

    # ------------------------------------------------------------------
    # Assistant
    # ------------------------------------------------------------------

    async def send_message(self, text: str) -> ChatReply:
        """Ask the assistant. Returns a fallback reply (ok=False) on any failure."""
        message = text.strip()
        if not message:
            return ChatReply(text=EMPTY_MESSAGE_REPLY, ok=False)

        try:
            response = await self._api.request(
                "POST", self._chat_url, json={"message": message},
            )
        except TransportError as e:
            logger.error("Assistant unreachable at %s: %s", self._chat_url, e)
            return ChatReply(text=CONNECTION_ERROR_REPLY, ok=False)

        reply = response.get("response")
        if response.get("success") and isinstance(reply, str):
            return ChatReply(text=reply)

        logger.warning(
            "Assistant error (HTTP %d): %s",
            response.status, response.message("error", default="no detail"),
        )
        return ChatReply(text=ASSISTANT_ERROR_REPLY, ok=False)
