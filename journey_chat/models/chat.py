from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declared_attr

from .base import Base, new_id, utcnow


class ConversationColumns:
    """Columns shared by chat sessions and user journeys."""

    id = Column(String, primary_key=True, index=True, default=new_id)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)
    title_updated_at = Column(DateTime(timezone=True), nullable=True)
    model = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    summary_tokens = Column(Integer, nullable=True)
    message_count = Column(Integer, nullable=False, default=0)
    # per-conversation ordinal counter, advanced by the store on message insert
    last_ordinal = Column(Integer, nullable=False, default=0)
    last_message_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class MessageColumns:
    id = Column(String, primary_key=True, index=True, default=new_id)
    user_id = Column(String, nullable=True)
    role = Column(String, nullable=False)
    content = Column(JSON, nullable=False)
    ordinal = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)


class ChatSession(ConversationColumns, Base):
    __tablename__ = "chat_session"


class ChatMessage(MessageColumns, Base):
    __tablename__ = "chat_message"

    @declared_attr
    def session_id(cls):
        return Column(
            String,
            ForeignKey("chat_session.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class UserJourney(ConversationColumns, Base):
    __tablename__ = "user_journey"

    journey_key = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)


class UserJourneyMessage(MessageColumns, Base):
    __tablename__ = "user_journey_message"

    @declared_attr
    def user_journey_id(cls):
        return Column(
            String,
            ForeignKey("user_journey.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
