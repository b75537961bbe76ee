import pytest
import requests

from journey_chat.auth import AuthClient, bearer_token
from journey_chat.errors import Unauthorized


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc.def") == "abc.def"
    for header in [None, "", "Basic abc", "bearer abc"]:
        with pytest.raises(Unauthorized):
            bearer_token(header)


def test_verify_returns_user_id(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None):
        seen["url"] = url
        seen["headers"] = headers
        return FakeResponse(200, {"id": "user-a", "email": "a@example.com"})

    monkeypatch.setattr(requests, "get", fake_get)

    assert AuthClient("https://auth.example/", "anon-key").verify("tok") == "user-a"
    assert seen["url"] == "https://auth.example/auth/v1/user"
    assert seen["headers"] == {"Authorization": "Bearer tok", "apikey": "anon-key"}


@pytest.mark.parametrize(
    "response",
    [FakeResponse(401, {"msg": "invalid JWT"}), FakeResponse(200, {}), FakeResponse(200)],
)
def test_verify_rejects(monkeypatch, response):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: response)
    with pytest.raises(Unauthorized):
        AuthClient("https://auth.example", "anon-key").verify("tok")


def test_unreachable_auth_service(monkeypatch):
    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", fake_get)
    with pytest.raises(Unauthorized):
        AuthClient("https://auth.example", "anon-key").verify("tok")
