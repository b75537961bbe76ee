import logging
from typing import Any, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_groq import ChatGroq
from pydantic import BaseModel, ConfigDict

from journey_chat.errors import EmptyResponse, RemoteFailure
from journey_chat.services.context import content_text
from journey_chat.settings import Config

logger = logging.getLogger(__name__)


class CompletionConfig(BaseModel):
    """Generation parameters; fixed per deployment, never taken from requests."""

    model_config = ConfigDict(frozen=True)

    provider: str = "groq"
    model: str = "openai/gpt-oss-120b"
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int = 2048
    reasoning_effort: str = "medium"
    # the provider SDKs retry 408/429/5xx on their own unless told not to
    max_retries: int = 0

    @classmethod
    def from_settings(cls, settings: Config, max_tokens: int | None = None):
        return cls(
            provider=settings.llm_provider,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            top_p=settings.llm_top_p,
            max_tokens=max_tokens or settings.llm_max_tokens,
            reasoning_effort=settings.llm_reasoning_effort,
            max_retries=settings.llm_max_retries,
        )


def build_chat_model(completion_config: CompletionConfig, settings: Config) -> BaseChatModel:
    if completion_config.provider == "google":
        return ChatGoogleGenerativeAI(
            model=completion_config.model,
            google_api_key=settings.gemini_api_key,
            temperature=completion_config.temperature,
            top_p=completion_config.top_p,
            max_output_tokens=completion_config.max_tokens,
            max_retries=completion_config.max_retries,
        )
    if completion_config.provider != "groq":
        raise ValueError(f"Unknown LLM provider: {completion_config.provider}")
    return ChatGroq(
        model=completion_config.model,
        api_key=settings.groq_api_key,
        temperature=completion_config.temperature,
        max_tokens=completion_config.max_tokens,
        reasoning_effort=completion_config.reasoning_effort,
        model_kwargs={"top_p": completion_config.top_p},
        streaming=False,
        max_retries=completion_config.max_retries,
    )


def to_langchain_messages(messages: Sequence[dict[str, Any]]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for msg in messages:
        role = msg.get("role", "")
        content = content_text(msg.get("content"))
        if role == "system":
            converted.append(SystemMessage(content=content))
        elif role == "assistant":
            converted.append(AIMessage(content=content))
        else:
            converted.append(HumanMessage(content=content))
    return converted


def response_text(response: Any) -> str:
    content = getattr(response, "content", None)
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        # multi-part responses (e.g. Gemini) carry text blocks or plain strings
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts).strip()
    return ""


class CompletionInvoker:
    """
    One non-streaming completion per call. No retries: a failed call ends
    the request.
    """

    def __init__(
        self,
        chat_model: BaseChatModel | None,
        completion_config: CompletionConfig,
        settings: Config | None = None,
    ):
        self._chat_model = chat_model
        self.completion_config = completion_config
        self.settings = settings

    @classmethod
    def from_config(cls, completion_config: CompletionConfig, settings: Config):
        # provider client is built on first completion, after the request is validated
        return cls(None, completion_config, settings)

    @property
    def chat_model(self) -> BaseChatModel:
        if self._chat_model is None:
            self._chat_model = build_chat_model(self.completion_config, self.settings)
        return self._chat_model

    def complete(self, messages: Sequence[dict[str, Any]]) -> str:
        logger.info(
            "Requesting completion: model=%s messages=%d max_tokens=%d",
            self.completion_config.model,
            len(messages),
            self.completion_config.max_tokens,
        )
        try:
            response = self.chat_model.invoke(to_langchain_messages(messages))
        except Exception as e:
            logger.error(f"Completion request failed: {e}", exc_info=True)
            raise RemoteFailure() from e

        text = response_text(response)
        if not text:
            logger.error("Completion returned empty content")
            raise EmptyResponse()
        return text
