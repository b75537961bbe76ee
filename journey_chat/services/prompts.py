import logging

from journey_chat.db.crud_helper import prompt_crud
from journey_chat.errors import UpstreamPromptMissing
from journey_chat.models.catalog import Prompt
from journey_chat.settings import config

logger = logging.getLogger(__name__)

SEED_SUFFIX = "_user"


def select_prompts(keys: list[str]) -> dict[str, str]:
    """
    Active prompt contents for `keys`. Keys without an active, non-empty
    prompt are simply absent from the result.
    """
    rows = prompt_crud.list_resource(
        columns=["key", "content"],
        where=[Prompt.key.in_(keys), Prompt.is_active.is_(True)],
    )
    return {row["key"]: row["content"] for row in rows if row["content"]}


def select_prompt(key: str) -> str:
    content = select_prompts([key]).get(key)
    if not content:
        logger.error("No active prompt for key %s", key)
        if key == config.system_prompt_key:
            raise UpstreamPromptMissing()
        raise UpstreamPromptMissing(f"Prompt not found for journey: {key}")
    return content


def select_kickoff_prompts(journey_key: str) -> tuple[str, str]:
    """
    The journey's system prompt plus its seed user turn (`<key>_user`).

    Kickoff cannot run without a seed, so a missing seed is as fatal as a
    missing system prompt.
    """
    seed_key = f"{journey_key}{SEED_SUFFIX}"
    found = select_prompts([journey_key, seed_key])
    if journey_key not in found:
        logger.error("No active journey prompt for %s", journey_key)
        raise UpstreamPromptMissing(f"Journey prompt not found for: {journey_key}")
    if seed_key not in found:
        logger.error("No active seed prompt %s", seed_key)
        raise UpstreamPromptMissing(f"Journey user prompt not found for: {journey_key}")
    return found[journey_key], found[seed_key]
