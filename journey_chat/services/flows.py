"""
Request flows that exchange messages with the completion backend.

Every step either succeeds or raises a `JourneyChatError`; nothing after a
failed step runs. A committed user turn is never rolled back.
"""
import concurrent.futures
import logging
from typing import Any, Optional

from journey_chat.errors import NotFoundOrForbidden
from journey_chat.services import catalog, conversations
from journey_chat.services.committer import TurnCommitter
from journey_chat.services.completion import CompletionInvoker
from journey_chat.services.context import assemble, greeting_turn
from journey_chat.services.conversations import JOURNEY, SESSION, ConversationKind
from journey_chat.services.history import load_history
from journey_chat.services.prompts import select_kickoff_prompts, select_prompt
from journey_chat.settings import config

logger = logging.getLogger(__name__)


def load_prompt_and_history(
    kind: ConversationKind, prompt_key: str, conversation_id: str
) -> tuple[str, list[dict[str, Any]]]:
    # independent reads, issued together
    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        prompt_future = executor.submit(select_prompt, prompt_key)
        history_future = executor.submit(
            load_history, kind, conversation_id, config.history_window
        )
        system_prompt = prompt_future.result()
        history = history_future.result()
    return system_prompt, history


def reply(
    kind: ConversationKind,
    user_id: str,
    conversation_id: str,
    content: str,
    invoker: CompletionInvoker,
) -> dict[str, Any]:
    conversation = conversations.resolve(
        kind,
        user_id,
        conversation_id,
        NotFoundOrForbidden(
            "Chat session not found or access denied"
            if kind is SESSION
            else "Journey not found or access denied"
        ),
    )
    committer = TurnCommitter(kind)
    committer.commit_user_turn(conversation_id, user_id, content)

    prompt_key = (
        config.system_prompt_key if kind is SESSION else conversation["journey_key"]
    )
    system_prompt, history = load_prompt_and_history(kind, prompt_key, conversation_id)
    logger.info(
        "Loaded %d history messages for %s %s", len(history), kind.name, conversation_id
    )

    text = invoker.complete(assemble(system_prompt, history))
    return committer.commit_assistant_turn(conversation_id, user_id, text)


def resume_session_greeting(
    user_id: str, session_id: str, invoker: CompletionInvoker
) -> dict[str, Any]:
    conversations.resolve(
        SESSION,
        user_id,
        session_id,
        NotFoundOrForbidden("Invalid chat session", status_code=400),
    )
    name = conversations.preferred_name(user_id)
    system_prompt, history = load_prompt_and_history(
        SESSION, config.system_prompt_key, session_id
    )
    messages = assemble(
        system_prompt,
        history,
        greeting_turn(config.return_greeting_template, name, config.default_name),
    )
    text = invoker.complete(messages)
    return TurnCommitter(SESSION).commit_assistant_turn(session_id, None, text)


def start_session_greeting(
    user_id: str, invoker: CompletionInvoker
) -> tuple[dict[str, Any], dict[str, Any], str, Optional[str]]:
    """
    Open a new session whose first message is a generated greeting.

    The session row is only created once a greeting exists; if storing the
    greeting then fails the row is removed again.
    """
    name = conversations.preferred_name(user_id)
    system_prompt = select_prompt(config.system_prompt_key)
    messages = assemble(
        system_prompt,
        [],
        greeting_turn(config.new_greeting_template, name, config.default_name),
    )
    text = invoker.complete(messages)

    session = conversations.create_session(user_id)
    message = TurnCommitter(SESSION).commit_assistant_turn(
        session["id"],
        None,
        {"text": text},
        created_in_request=True,
        error_message="Failed to write message",
    )
    return session, message, text, name


def resolve_journey(user_id: str, journey_key: str) -> tuple[dict[str, Any], str]:
    entry = catalog.get_journey(journey_key)
    if entry is None:
        raise NotFoundOrForbidden("Journey not found")
    journey = conversations.get_or_create_journey(user_id, journey_key)
    return journey, entry["title"]


def kickoff_journey(
    user_id: str, user_journey_id: str, invoker: CompletionInvoker
) -> dict[str, Any]:
    journey = conversations.resolve(
        JOURNEY,
        user_id,
        user_journey_id,
        NotFoundOrForbidden("Journey not found or access denied"),
    )
    system_prompt, seed = select_kickoff_prompts(journey["journey_key"])
    text = invoker.complete(assemble(system_prompt, [], seed))
    return TurnCommitter(JOURNEY).commit_assistant_turn(
        user_journey_id, user_id, text, error_message="Failed to write message"
    )
