"""Building the ordered message list sent to the completion backend."""
import json
from typing import Any, Iterable, Optional


def assemble(
    system_prompt: str,
    history: Iterable[dict[str, Any]],
    new_turn: Optional[str] = None,
) -> list[dict[str, Any]]:
    """
    System prompt first, then the stored history as-is, then an optional
    trailing user turn.

    Reply flows pass no `new_turn`: the user's message is committed before
    history is loaded, so it is already the last history entry.
    """
    messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": m["role"], "content": m["content"]} for m in history)
    if new_turn is not None:
        messages.append({"role": "user", "content": new_turn})
    return messages


def greeting_turn(template: str, name: Optional[str], default_name: str) -> str:
    return template.replace("{name}", name or default_name)


def content_text(content: Any) -> str:
    """Flatten stored message content (plain text or a JSON payload) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, dict) and isinstance(content.get("text"), str):
        return content["text"]
    return json.dumps(content)
