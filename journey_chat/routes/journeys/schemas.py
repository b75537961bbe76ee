from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class JourneySummary(BaseModel):
    """One entry of the journey catalog"""
    id: int
    key: str
    title: str
    description: Optional[str] = None
    theme: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    order: int = 0


class JourneyListResponse(BaseModel):
    journeys: List[JourneySummary]
    count: int


class ResolveJourneyRequest(BaseModel):
    journey_key: str = Field(..., min_length=1, description="Catalog key of the journey")


class ResolveJourneyResponse(BaseModel):
    user_journey_id: str
    journey_key: str
    journey_title: str


class StartJourneyRequest(BaseModel):
    user_journey_id: str = Field(..., min_length=1)


class JourneyMessageResponse(BaseModel):
    """Assistant message stored in a user journey"""
    user_journey_id: str
    user_journey_message_id: str
    role: Literal["assistant"] = "assistant"
    content: str
    ordinal: int
    created_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_journey_id": "5f0c7a8e-3c1b-4f57-8d0e-6b2a9f4e1d23",
                "user_journey_message_id": "c4d1f2e3-7a6b-4c5d-9e8f-0a1b2c3d4e5f",
                "role": "assistant",
                "content": "Let's begin. What brought you here today?",
                "ordinal": 1,
                "created_at": "2025-07-06T17:47:24.660597+00:00",
            }
        }
    )


class JourneyReplyRequest(BaseModel):
    user_journey_id: str = Field(..., min_length=1)
    role: Literal["user"] = "user"
    content: str = Field(..., min_length=1, description="The user's message")
