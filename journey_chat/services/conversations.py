"""
Conversation containers: chat sessions and user journeys.

Both kinds share the same resolve/create contract; `ConversationKind`
carries the tables and column names that differ between them.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from journey_chat.db import CRUDCapability
from journey_chat.db.crud_helper import (
    chat_message_crud,
    chat_session_crud,
    profile_crud,
    user_journey_crud,
    user_journey_message_crud,
    MessageCRUD,
)
from journey_chat.errors import NotFoundOrForbidden, PersistenceFailed
from journey_chat.models.catalog import Profile
from journey_chat.models.chat import (
    ChatMessage,
    ChatSession,
    UserJourney,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationKind:
    name: str
    conversation_crud: CRUDCapability
    message_crud: MessageCRUD
    parent_key: str

    @property
    def conversation_db(self):
        return self.conversation_crud.resource_db

    @property
    def message_db(self):
        return self.message_crud.resource_db


SESSION = ConversationKind(
    name="chat_session",
    conversation_crud=chat_session_crud,
    message_crud=chat_message_crud,
    parent_key="session_id",
)

JOURNEY = ConversationKind(
    name="user_journey",
    conversation_crud=user_journey_crud,
    message_crud=user_journey_message_crud,
    parent_key="user_journey_id",
)


def resolve(
    kind: ConversationKind,
    user_id: str,
    conversation_id: str,
    not_found: NotFoundOrForbidden | None = None,
) -> dict[str, Any]:
    """
    Fetch a conversation the caller owns.

    A missing row and a row owned by someone else raise the same error so
    that callers cannot discover other users' conversation ids.
    """
    conversation = kind.conversation_crud.get_resource(resource_id=conversation_id)
    if conversation is None or conversation["user_id"] != user_id:
        logger.info(
            "%s %s not found for user %s", kind.name, conversation_id, user_id
        )
        raise not_found or NotFoundOrForbidden()
    return conversation


def create_session(user_id: str) -> dict[str, Any]:
    try:
        return chat_session_crud.create_resource({"user_id": user_id})
    except Exception as e:
        logger.error(f"Error creating chat session: {e}", exc_info=True)
        raise PersistenceFailed("Failed to create session") from e


def get_or_create_journey(user_id: str, journey_key: str) -> dict[str, Any]:
    """
    Reuse the caller's active journey for `journey_key` or start one.

    Exactly one insert happens on the create path; two concurrent first
    requests can still produce two active rows, which is tolerated here.
    """
    existing = user_journey_crud.get_resource(
        resource_id=None,
        where=[
            UserJourney.user_id == user_id,
            UserJourney.journey_key == journey_key,
            UserJourney.is_active.is_(True),
        ],
        order_by=["-created_at"],
    )
    if existing is not None:
        return existing
    try:
        created = user_journey_crud.create_resource(
            {"user_id": user_id, "journey_key": journey_key, "is_active": True}
        )
    except Exception as e:
        logger.error(f"Error creating journey {journey_key}: {e}", exc_info=True)
        raise PersistenceFailed("Failed to create journey") from e
    logger.info("Created journey %s (%s) for user %s", created["id"], journey_key, user_id)
    return created


def preferred_name(user_id: str) -> Optional[str]:
    """The caller's display name, or None when no profile says otherwise."""
    profile = profile_crud.get_resource(
        resource_id=None,
        columns=["preferred_name"],
        where=[Profile.id == user_id],
    )
    if profile is None:
        return None
    return profile["preferred_name"] or None


def latest_session_today(
    user_id: str, now: datetime | None = None
) -> Optional[tuple[dict[str, Any], Optional[dict[str, Any]]]]:
    """The newest session created today (UTC) and its latest message."""
    now = now or datetime.now(timezone.utc)
    day_start = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    day_end = day_start + timedelta(days=1)

    session = chat_session_crud.get_resource(
        resource_id=None,
        where=[
            ChatSession.user_id == user_id,
            ChatSession.created_at >= day_start,
            ChatSession.created_at < day_end,
        ],
        order_by=["-created_at"],
    )
    if session is None:
        return None
    latest_message = chat_message_crud.get_resource(
        resource_id=None,
        columns=["id", "role", "content", "created_at"],
        where=[ChatMessage.session_id == session["id"]],
        order_by=["-ordinal"],
    )
    return session, latest_message

