import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from journey_chat.auth import get_current_user
from journey_chat.errors import BadRequest
from journey_chat.routes.chat.schemas import (
    ChatReplyRequest,
    ChatReplyResponse,
    LatestMessage,
    NewGreetingResponse,
    ReturnGreetingRequest,
    ReturnGreetingResponse,
    TodaySessionResponse,
)
from journey_chat.routes.dependencies import get_completion_invoker
from journey_chat.routes.schemas import ERROR_RESPONSES
from journey_chat.services import conversations, flows
from journey_chat.services.completion import CompletionInvoker
from journey_chat.services.context import content_text
from journey_chat.services.conversations import SESSION

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/sessions/greeting",
    response_model=NewGreetingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Open a new chat session",
    description="Creates a session whose first message is a personalised greeting",
)
def new_session_greeting(
    user_id: str = Depends(get_current_user),
    invoker: CompletionInvoker = Depends(get_completion_invoker),
):
    session, message, text, name = flows.start_session_greeting(user_id, invoker)
    logger.info("Opened chat session %s for user %s", session["id"], user_id)
    return NewGreetingResponse(
        session_id=session["id"],
        assistant_text=text,
        assistant_message_id=message["id"],
        name_used=name,
    )


@router.post(
    "/sessions/return-greeting",
    response_model=ReturnGreetingResponse,
    responses=ERROR_RESPONSES,
    summary="Greet a returning user",
    description="Continues an existing session with a welcome-back message",
)
def return_session_greeting(
    request: ReturnGreetingRequest,
    user_id: str = Depends(get_current_user),
    invoker: CompletionInvoker = Depends(get_completion_invoker),
):
    if not request.chat_session_id:
        logger.info("Missing chat_session_id in return-greeting request")
        raise BadRequest("Missing chat_session_id")
    message = flows.resume_session_greeting(user_id, request.chat_session_id, invoker)
    return ReturnGreetingResponse(
        chat_session_id=request.chat_session_id,
        chat_message_id=message["id"],
        content=content_text(message["content"]),
    )


@router.post(
    "/messages",
    response_model=ChatReplyResponse,
    responses=ERROR_RESPONSES,
    summary="Send a message",
    description="Stores the user's message and returns the assistant's reply",
)
def send_message(
    request: ChatReplyRequest,
    user_id: str = Depends(get_current_user),
    invoker: CompletionInvoker = Depends(get_completion_invoker),
):
    message = flows.reply(
        SESSION, user_id, request.chat_session_id, request.content, invoker
    )
    return ChatReplyResponse(
        chat_session_id=request.chat_session_id,
        chat_message_id=message["id"],
        content=content_text(message["content"]),
        ordinal=message["ordinal"],
        created_at=message["created_at"],
    )


@router.get(
    "/sessions/today",
    response_model=TodaySessionResponse,
    responses=ERROR_RESPONSES,
    summary="Today's latest session",
    description="Returns the caller's newest session created today (UTC)",
)
def todays_latest_session(user_id: str = Depends(get_current_user)):
    found = conversations.latest_session_today(user_id)
    if found is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "chat_session_id": None,
                "message": "No chat session found for today",
            },
        )
    session, latest = found
    return TodaySessionResponse(
        chat_session_id=session["id"],
        title=session["title"],
        title_updated_at=session["title_updated_at"],
        model=session["model"],
        summary=session["summary"],
        summary_tokens=session["summary_tokens"],
        message_count=session["message_count"],
        last_message_at=session["last_message_at"],
        created_at=session["created_at"],
        updated_at=session["updated_at"],
        latest_message=LatestMessage(**latest) if latest else None,
    )
