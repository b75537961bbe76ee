from typing import Any, List, Optional

import pytest
from fastapi import Header
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from pydantic import Field

from journey_chat.__main__ import app
from journey_chat.auth import get_current_user
from journey_chat.db import init_db
from journey_chat.db.crud_helper import (
    chat_session_crud,
    journey_crud,
    profile_crud,
    prompt_crud,
    user_journey_crud,
)
from journey_chat.errors import Unauthorized
from journey_chat.routes.dependencies import (
    get_completion_invoker,
    get_journey_completion_invoker,
)
from journey_chat.services.completion import CompletionConfig, CompletionInvoker
from journey_chat.settings import config

SYSTEM_PROMPT = "You are a warm, attentive companion."


class RecordingChatModel(FakeListChatModel):
    """Fake chat model that remembers every message list it was sent."""

    received: List[Any] = Field(default_factory=list)

    def _call(self, messages, stop=None, run_manager=None, **kwargs):
        self.received.append(messages)
        return super()._call(messages, stop=stop, run_manager=run_manager, **kwargs)


class FailingChatModel(FakeListChatModel):
    def _call(self, messages, stop=None, run_manager=None, **kwargs):
        raise RuntimeError("upstream returned 503")


def make_invoker(*responses: str) -> CompletionInvoker:
    return CompletionInvoker(
        RecordingChatModel(responses=list(responses) or ["ok"]), CompletionConfig()
    )


@pytest.fixture(autouse=True)
def db_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'journey_chat_test.db'}"
    monkeypatch.setattr(config, "db_url", url)
    init_db(url)
    yield url


def token_user(authorization: Optional[str] = Header(default=None)) -> str:
    """Test identity: the bearer token is the user id."""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized()
    return authorization[len("Bearer "):]


@pytest.fixture
def invoker():
    return make_invoker("Hello again!")


@pytest.fixture
def client(invoker):
    app.dependency_overrides[get_current_user] = token_user
    app.dependency_overrides[get_completion_invoker] = lambda: invoker
    app.dependency_overrides[get_journey_completion_invoker] = lambda: invoker
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {user_id}"}


def add_prompt(key: str, content: str, is_active: bool = True) -> dict:
    return prompt_crud.create_resource(
        {"key": key, "content": content, "is_active": is_active}
    )


def add_session(user_id: str) -> dict:
    return chat_session_crud.create_resource({"user_id": user_id})


def add_journey(user_id: str, journey_key: str, is_active: bool = True) -> dict:
    return user_journey_crud.create_resource(
        {"user_id": user_id, "journey_key": journey_key, "is_active": is_active}
    )


def add_catalog_entry(key: str, title: str, order: int = 0, is_active: bool = True) -> dict:
    return journey_crud.create_resource(
        {
            "key": key,
            "title": title,
            "short_description": f"{title} in a few steps",
            "theme": "calm",
            "meta": {"duration": "10m"},
            "order": order,
            "is_active": is_active,
        }
    )


def add_profile(user_id: str, preferred_name: Optional[str]) -> dict:
    return profile_crud.create_resource({"id": user_id, "preferred_name": preferred_name})


@pytest.fixture
def system_prompt():
    return add_prompt(config.system_prompt_key, SYSTEM_PROMPT)
