from typing import Any

from sqlalchemy import select, update

from journey_chat.db import CRUDCapability
from journey_chat.models.base import utcnow
from journey_chat.models.catalog import Journey, Profile, Prompt
from journey_chat.models.chat import (
    ChatMessage,
    ChatSession,
    UserJourney,
    UserJourneyMessage,
)


class ChatSessionCRUD(CRUDCapability[ChatSession]):
    resource_db = ChatSession


class UserJourneyCRUD(CRUDCapability[UserJourney]):
    resource_db = UserJourney


class MessageCRUD(CRUDCapability):
    """
    Message tables whose ordinal is owned by the store.

    Inserting a message advances the parent conversation's counter and its
    rolling metadata in the same transaction as the insert, so ordinals are
    strictly increasing per conversation whatever the callers do.
    """

    parent_db: Any
    parent_key: str

    def __init__(self, resource_db, parent_db, parent_key: str) -> None:
        super().__init__(resource_db)
        self.parent_db = parent_db
        self.parent_key = parent_key

    def create_resource(self, data: dict[str, Any]) -> dict[str, Any]:
        parent_id = data[self.parent_key]
        with self.session_scope() as session:
            # holds the parent row's write lock until commit
            result = session.execute(
                update(self.parent_db)
                .where(self.parent_db.id == parent_id)
                .values(
                    last_ordinal=self.parent_db.last_ordinal + 1,
                    message_count=self.parent_db.message_count + 1,
                ),
                execution_options={"synchronize_session": False},
            )
            if result.rowcount != 1:
                raise LookupError(f"No conversation {parent_id} to append to")
            now = utcnow()
            session.execute(
                update(self.parent_db)
                .where(self.parent_db.id == parent_id)
                .values(last_message_at=now, updated_at=now),
                execution_options={"synchronize_session": False},
            )
            ordinal = session.execute(
                select(self.parent_db.last_ordinal).where(
                    self.parent_db.id == parent_id
                )
            ).scalar_one()

            resource = self.resource_db(**data, ordinal=ordinal, created_at=now)
            session.add(resource)
            session.flush()
            session.commit()
            session.refresh(resource)
            return self.db_row_to_model(resource)


class PromptCRUD(CRUDCapability[Prompt]):
    resource_db = Prompt


class JourneyCRUD(CRUDCapability[Journey]):
    resource_db = Journey


class ProfileCRUD(CRUDCapability[Profile]):
    resource_db = Profile


chat_session_crud = ChatSessionCRUD(ChatSession)
chat_message_crud = MessageCRUD(ChatMessage, ChatSession, "session_id")
user_journey_crud = UserJourneyCRUD(UserJourney)
user_journey_message_crud = MessageCRUD(
    UserJourneyMessage, UserJourney, "user_journey_id"
)
prompt_crud = PromptCRUD(Prompt)
journey_crud = JourneyCRUD(Journey)
profile_crud = ProfileCRUD(Profile)
