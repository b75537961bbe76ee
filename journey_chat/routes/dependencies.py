from journey_chat.services.completion import CompletionConfig, CompletionInvoker
from journey_chat.settings import config


def get_completion_invoker() -> CompletionInvoker:
    return CompletionInvoker.from_config(CompletionConfig.from_settings(config), config)


def get_journey_completion_invoker() -> CompletionInvoker:
    """Journey replies run on a tighter output budget than the other flows."""
    return CompletionInvoker.from_config(
        CompletionConfig.from_settings(config, max_tokens=config.journey_llm_max_tokens),
        config,
    )
