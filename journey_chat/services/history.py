import logging
from typing import Any

from journey_chat.errors import HistoryFetchFailed
from journey_chat.services.conversations import ConversationKind

logger = logging.getLogger(__name__)


def load_history(
    kind: ConversationKind, conversation_id: str, limit: int
) -> list[dict[str, Any]]:
    """
    The `limit` most recent messages of a conversation, oldest first.

    Rows are fetched newest-first so the window keeps the latest turns,
    then flipped so the result reads chronologically.
    """
    message_db = kind.message_db
    try:
        rows = kind.message_crud.list_resource(
            columns=["id", "role", "content", "ordinal", "created_at"],
            where=[getattr(message_db, kind.parent_key) == conversation_id],
            order_by=["-ordinal"],
            limit=limit,
        )
    except Exception as e:
        logger.error(
            f"Error loading history for {kind.name} {conversation_id}: {e}",
            exc_info=True,
        )
        raise HistoryFetchFailed() from e
    rows.reverse()
    return rows
