import logging

from fastapi import APIRouter, Depends, status

from journey_chat.auth import get_current_user
from journey_chat.routes.dependencies import (
    get_completion_invoker,
    get_journey_completion_invoker,
)
from journey_chat.routes.schemas import ERROR_RESPONSES
from journey_chat.routes.journeys.schemas import (
    JourneyListResponse,
    JourneyMessageResponse,
    JourneyReplyRequest,
    JourneySummary,
    ResolveJourneyRequest,
    ResolveJourneyResponse,
    StartJourneyRequest,
)
from journey_chat.services import catalog, flows
from journey_chat.services.completion import CompletionInvoker
from journey_chat.services.conversations import JOURNEY

logger = logging.getLogger(__name__)

router = APIRouter()


def to_message_response(user_journey_id: str, message: dict) -> JourneyMessageResponse:
    return JourneyMessageResponse(
        user_journey_id=user_journey_id,
        user_journey_message_id=message["id"],
        content=message["content"],
        ordinal=message["ordinal"],
        created_at=message["created_at"],
    )


@router.post(
    "/list",
    response_model=JourneyListResponse,
    responses=ERROR_RESPONSES,
    summary="List journeys",
    description="Active journeys of the catalog in display order",
)
def list_journeys(user_id: str = Depends(get_current_user)):
    journeys = [
        JourneySummary(
            id=row["id"],
            key=row["key"],
            title=row["title"],
            description=row["short_description"],
            theme=row["theme"],
            metadata=row["meta"] or {},
            order=row["order"],
        )
        for row in catalog.list_journeys()
    ]
    return JourneyListResponse(journeys=journeys, count=len(journeys))


@router.post(
    "/resolve",
    response_model=ResolveJourneyResponse,
    responses=ERROR_RESPONSES,
    summary="Get or create the caller's journey",
    description="Returns the caller's active journey for a catalog key, creating it if needed",
)
def resolve_journey(
    request: ResolveJourneyRequest, user_id: str = Depends(get_current_user)
):
    journey, title = flows.resolve_journey(user_id, request.journey_key)
    logger.info("Resolved journey %s (%s) for user %s", journey["id"], request.journey_key, user_id)
    return ResolveJourneyResponse(
        user_journey_id=journey["id"],
        journey_key=request.journey_key,
        journey_title=title,
    )


@router.post(
    "/start",
    response_model=JourneyMessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Start a journey",
    description="Generates the journey's opening assistant message",
)
def start_journey(
    request: StartJourneyRequest,
    user_id: str = Depends(get_current_user),
    invoker: CompletionInvoker = Depends(get_completion_invoker),
):
    message = flows.kickoff_journey(user_id, request.user_journey_id, invoker)
    return to_message_response(request.user_journey_id, message)


@router.post(
    "/messages",
    response_model=JourneyMessageResponse,
    responses=ERROR_RESPONSES,
    summary="Send a journey message",
    description="Stores the user's message and returns the assistant's reply",
)
def send_journey_message(
    request: JourneyReplyRequest,
    user_id: str = Depends(get_current_user),
    invoker: CompletionInvoker = Depends(get_journey_completion_invoker),
):
    message = flows.reply(
        JOURNEY, user_id, request.user_journey_id, request.content, invoker
    )
    return to_message_response(request.user_journey_id, message)
