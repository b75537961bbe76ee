import logging
from typing import Any, Optional

from journey_chat.errors import PersistenceFailed
from journey_chat.services.conversations import ConversationKind

logger = logging.getLogger(__name__)


class TurnCommitter:
    """
    Writes turns into one kind of conversation.

    Ordinals and timestamps come back from the store and are passed through
    untouched.
    """

    def __init__(self, kind: ConversationKind):
        self.kind = kind

    def _insert(
        self,
        conversation_id: str,
        user_id: Optional[str],
        role: str,
        content: Any,
        error_message: str,
    ) -> dict[str, Any]:
        try:
            message = self.kind.message_crud.create_resource(
                {
                    self.kind.parent_key: conversation_id,
                    "user_id": user_id,
                    "role": role,
                    "content": content,
                }
            )
        except Exception as e:
            logger.error(
                f"Error saving {role} message in {self.kind.name} {conversation_id}: {e}",
                exc_info=True,
            )
            raise PersistenceFailed(error_message) from e
        logger.info(
            "Saved %s message %s in %s %s (ordinal %s)",
            role,
            message["id"],
            self.kind.name,
            conversation_id,
            message["ordinal"],
        )
        return message

    def commit_user_turn(self, conversation_id: str, user_id: str, content: Any) -> dict[str, Any]:
        return self._insert(
            conversation_id, user_id, "user", content, "Failed to save user message"
        )

    def commit_assistant_turn(
        self,
        conversation_id: str,
        user_id: Optional[str],
        content: Any,
        created_in_request: bool = False,
        error_message: str = "Failed to save message",
    ) -> dict[str, Any]:
        """
        Persist the assistant reply. When the conversation was created by the
        current request, a failed write deletes it again before the error is
        raised, so the caller sees no half-made conversation.
        """
        try:
            return self._insert(
                conversation_id, user_id, "assistant", content, error_message
            )
        except PersistenceFailed:
            if created_in_request:
                self.compensate(conversation_id)
            raise

    def compensate(self, conversation_id: str) -> None:
        """Best-effort delete of a conversation; failures are only logged."""
        try:
            self.kind.conversation_crud.delete_resource(resource_id=conversation_id)
            logger.info("Removed orphaned %s %s", self.kind.name, conversation_id)
        except Exception as e:
            logger.error(
                f"Cleanup of {self.kind.name} {conversation_id} failed: {e}",
                exc_info=True,
            )
