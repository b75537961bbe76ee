from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReturnGreetingRequest(BaseModel):
    """Request model for greeting a returning user in an existing session"""
    chat_session_id: Optional[str] = Field(None, description="Session to resume")


class ReturnGreetingResponse(BaseModel):
    chat_session_id: str
    chat_message_id: str
    role: Literal["assistant"] = "assistant"
    content: str


class NewGreetingResponse(BaseModel):
    """Response model for a freshly opened session"""
    session_id: str = Field(..., description="Identifier of the new chat session")
    assistant_text: str = Field(..., description="Generated greeting")
    assistant_message_id: Optional[str] = Field(None, description="Stored greeting message")
    name_used: Optional[str] = Field(None, description="Preferred name the greeting used, if any")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "a542db3f-0e80-4d34-8574-982966e038c6",
                "assistant_text": "Hey Sam, good to see you here.",
                "assistant_message_id": "0b1f63d5-1d2e-4a57-9a0f-2f0e4f3b5c11",
                "name_used": "Sam",
            }
        }
    )


class ChatReplyRequest(BaseModel):
    """Request model for sending a message in a session"""
    chat_session_id: str = Field(..., min_length=1)
    role: Literal["user"] = "user"
    content: str = Field(..., min_length=1, description="The user's message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "chat_session_id": "a542db3f-0e80-4d34-8574-982966e038c6",
                "role": "user",
                "content": "what's the weather",
            }
        }
    )


class ChatReplyResponse(BaseModel):
    """Response model for the assistant's reply"""
    chat_session_id: str
    chat_message_id: str
    role: Literal["assistant"] = "assistant"
    content: str
    ordinal: int = Field(..., description="Store-assigned position in the session")
    created_at: datetime


class LatestMessage(BaseModel):
    id: str
    role: str
    content: Any
    created_at: Optional[datetime] = None


class TodaySessionResponse(BaseModel):
    """Today's newest session with its rolling metadata"""
    chat_session_id: str
    title: Optional[str] = None
    title_updated_at: Optional[datetime] = None
    model: Optional[str] = None
    summary: Optional[str] = None
    summary_tokens: Optional[int] = None
    message_count: int = 0
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    latest_message: Optional[LatestMessage] = None
