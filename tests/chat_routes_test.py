from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from journey_chat.db.crud_helper import chat_message_crud, chat_session_crud
from journey_chat.models.chat import ChatSession
from journey_chat.__main__ import app
from journey_chat.auth import get_current_user
from journey_chat.routes.dependencies import get_completion_invoker
from journey_chat.services.completion import CompletionConfig, CompletionInvoker
from journey_chat.services.conversations import SESSION
from journey_chat.services.history import load_history
from journey_chat.settings import config

from conftest import (
    SYSTEM_PROMPT,
    FailingChatModel,
    add_profile,
    add_session,
    auth,
    make_invoker,
    token_user,
)


def seed_conversation(user_id: str = "user-a") -> dict:
    session = add_session(user_id)
    for role, content in [("user", "hi"), ("assistant", "hello")]:
        chat_message_crud.create_resource(
            {"session_id": session["id"], "user_id": user_id, "role": role, "content": content}
        )
    return session


def use_invoker(invoker):
    app.dependency_overrides[get_completion_invoker] = lambda: invoker


def test_reply_commits_both_turns_in_order(client, invoker, system_prompt):
    session = seed_conversation()

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": session["id"], "role": "user", "content": "what's the weather"},
        headers=auth("user-a"),
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    body = resp.json()
    assert body["chat_session_id"] == session["id"]
    assert body["role"] == "assistant"
    assert body["content"] == "Hello again!"
    assert body["ordinal"] == 4
    assert body["created_at"]

    # the new user turn is sent exactly once, as the last history entry
    sent = invoker.chat_model.received[0]
    assert [(type(m), m.content) for m in sent] == [
        (SystemMessage, SYSTEM_PROMPT),
        (HumanMessage, "hi"),
        (AIMessage, "hello"),
        (HumanMessage, "what's the weather"),
    ]

    history = load_history(SESSION, session["id"], 40)
    assert [(m["ordinal"], m["role"]) for m in history] == [
        (1, "user"),
        (2, "assistant"),
        (3, "user"),
        (4, "assistant"),
    ]
    assert history[-1]["id"] == body["chat_message_id"]


def test_user_turn_survives_completion_failure(client, system_prompt):
    session = seed_conversation()
    use_invoker(CompletionInvoker(FailingChatModel(responses=["x"]), CompletionConfig()))

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": session["id"], "content": "are you there?"},
        headers=auth("user-a"),
    )

    assert resp.status_code == 500
    assert resp.json() == {"error": "LLM API request failed"}
    history = load_history(SESSION, session["id"], 40)
    assert [m["content"] for m in history] == ["hi", "hello", "are you there?"]


def test_blank_completion_persists_no_assistant_turn(client, system_prompt):
    session = seed_conversation()
    use_invoker(make_invoker("   "))

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": session["id"], "content": "hello?"},
        headers=auth("user-a"),
    )

    assert resp.status_code == 500
    assert resp.json() == {"error": "LLM returned empty response"}
    roles = [m["role"] for m in load_history(SESSION, session["id"], 40)]
    assert roles == ["user", "assistant", "user"]


def test_reply_without_system_prompt_fails(client):
    session = seed_conversation()

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": session["id"], "content": "hello?"},
        headers=auth("user-a"),
    )

    assert resp.status_code == 500
    assert resp.json() == {"error": "System prompt not found"}


def test_reply_to_someone_elses_session_is_not_found(client, invoker, system_prompt):
    session = seed_conversation("user-a")

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": session["id"], "content": "let me in"},
        headers=auth("user-b"),
    )

    assert resp.status_code == 404
    assert resp.json() == {"error": "Chat session not found or access denied"}
    assert "hello" not in resp.text
    assert invoker.chat_model.received == []
    assert len(load_history(SESSION, session["id"], 40)) == 2


def test_missing_fields_are_bad_requests(client, system_prompt):
    resp = client.post(
        "/api/v1/chat/messages", json={"chat_session_id": "abc"}, headers=auth("user-a")
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": "abc", "content": ""},
        headers=auth("user-a"),
    )
    assert resp.status_code == 400


def test_requests_need_a_bearer_token(client):
    resp = client.post("/api/v1/chat/messages", json={"chat_session_id": "a", "content": "b"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}

    resp = client.post(
        "/api/v1/chat/messages",
        json={"chat_session_id": "a", "content": "b"},
        headers={"Authorization": "Basic abc"},
    )
    assert resp.status_code == 401


def test_unsupported_method(client):
    resp = client.get("/api/v1/chat/messages", headers=auth("user-a"))
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed"}


def test_preflight_is_answered_without_auth(client):
    resp = client.options(
        "/api/v1/chat/messages",
        headers={"Origin": "https://app.example", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 204
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "authorization" in resp.headers["access-control-allow-headers"]


def test_new_session_greeting_uses_preferred_name(client, invoker, system_prompt):
    add_profile("user-a", "Sam")

    resp = client.post("/api/v1/chat/sessions/greeting", headers=auth("user-a"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["assistant_text"] == "Hello again!"
    assert body["name_used"] == "Sam"
    sent = invoker.chat_model.received[0]
    assert len(sent) == 2
    assert sent[1].content.endswith("My name is Sam")

    history = load_history(SESSION, body["session_id"], 40)
    assert len(history) == 1
    assert history[0]["content"] == {"text": "Hello again!"}
    assert history[0]["id"] == body["assistant_message_id"]


def test_new_session_greeting_falls_back_without_profile(client, invoker, system_prompt):
    resp = client.post("/api/v1/chat/sessions/greeting", headers=auth("user-a"))

    assert resp.status_code == 201
    assert resp.json()["name_used"] is None
    assert invoker.chat_model.received[0][1].content.endswith(
        f"My name is {config.default_name}"
    )


def test_failed_greeting_write_leaves_no_session(client, system_prompt, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("insert rejected")

    monkeypatch.setattr(chat_message_crud, "create_resource", broken)

    resp = client.post("/api/v1/chat/sessions/greeting", headers=auth("user-a"))

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to write message"}
    assert chat_session_crud.list_resource(where=[ChatSession.user_id == "user-a"]) == []


def test_failed_greeting_completion_creates_nothing(client, system_prompt):
    use_invoker(make_invoker(""))

    resp = client.post("/api/v1/chat/sessions/greeting", headers=auth("user-a"))

    assert resp.status_code == 500
    assert chat_session_crud.list_resource(where=[ChatSession.user_id == "user-a"]) == []


def test_return_greeting_continues_history(client, invoker, system_prompt):
    session = seed_conversation()
    add_profile("user-a", "Sam")

    resp = client.post(
        "/api/v1/chat/sessions/return-greeting",
        json={"chat_session_id": session["id"]},
        headers=auth("user-a"),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body == {
        "chat_session_id": session["id"],
        "chat_message_id": body["chat_message_id"],
        "role": "assistant",
        "content": "Hello again!",
    }
    sent = invoker.chat_model.received[0]
    assert [m.content for m in sent[1:3]] == ["hi", "hello"]
    assert sent[-1].content.startswith("I am back in the chat.")
    assert sent[-1].content.endswith("My name is Sam")

    stored = chat_message_crud.get_resource(resource_id=body["chat_message_id"])
    assert stored["ordinal"] == 3
    assert stored["user_id"] is None


def test_return_greeting_for_foreign_session_is_bad_request(client, system_prompt):
    session = seed_conversation("user-a")

    resp = client.post(
        "/api/v1/chat/sessions/return-greeting",
        json={"chat_session_id": session["id"]},
        headers=auth("user-b"),
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid chat session"}


def test_todays_session(client):
    session = seed_conversation()

    resp = client.get("/api/v1/chat/sessions/today", headers=auth("user-a"))

    assert resp.status_code == 200
    body = resp.json()
    assert body["chat_session_id"] == session["id"]
    assert body["message_count"] == 2
    assert body["latest_message"]["role"] == "assistant"
    assert body["latest_message"]["content"] == "hello"


def test_no_session_today(client):
    resp = client.get("/api/v1/chat/sessions/today", headers=auth("user-a"))

    assert resp.status_code == 404
    assert resp.json() == {
        "chat_session_id": None,
        "message": "No chat session found for today",
    }


def test_return_greeting_without_session_id_is_bad_request(client, invoker):
    resp = client.post(
        "/api/v1/chat/sessions/return-greeting", json={}, headers=auth("user-a")
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing chat_session_id"}
    assert invoker.chat_model.received == []


def test_malformed_body_is_rejected_before_the_provider_client_exists(monkeypatch):
    monkeypatch.setattr(config, "groq_api_key", None)
    app.dependency_overrides[get_current_user] = token_user
    try:
        resp = TestClient(app).post(
            "/api/v1/chat/messages", json={}, headers=auth("user-a")
        )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}
