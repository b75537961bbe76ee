import logging

import requests
from fastapi import Header

from journey_chat.errors import Unauthorized
from journey_chat.settings import config

logger = logging.getLogger(__name__)

AUTH_TIMEOUT = 10  # seconds


class AuthClient:
    """Resolves bearer tokens to user ids against the hosted auth service."""

    def __init__(self, base_url: str, api_key: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def verify(self, token: str) -> str:
        try:
            resp = requests.get(
                f"{self.base_url}/auth/v1/user",
                headers={"Authorization": f"Bearer {token}", "apikey": self.api_key},
                timeout=AUTH_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning(f"Auth service unreachable: {e}")
            raise Unauthorized() from e
        if resp.status_code != 200:
            logger.info("Token rejected by auth service (HTTP %s)", resp.status_code)
            raise Unauthorized()
        try:
            user_id = resp.json().get("id")
        except ValueError as e:
            raise Unauthorized() from e
        if not user_id:
            raise Unauthorized()
        return user_id


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized()
    return authorization[len("Bearer "):]


def get_auth_client() -> AuthClient:
    return AuthClient(config.auth_url, config.auth_api_key)


def get_current_user(authorization: str | None = Header(default=None)) -> str:
    return get_auth_client().verify(bearer_token(authorization))
