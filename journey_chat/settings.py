from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    db_url: str = Field(default="sqlite:///./journey_chat.db")
    auth_url: str = Field(default="http://localhost:54321")
    auth_api_key: str = Field(default="")

    llm_provider: str = Field(default="groq")  # groq or google
    groq_api_key: str | None = Field(default=None)
    gemini_api_key: str | None = Field(default=None)
    llm_model: str = Field(default="openai/gpt-oss-120b")
    llm_temperature: float = Field(default=1.0)
    llm_top_p: float = Field(default=1.0)
    llm_max_tokens: int = Field(default=2048)
    journey_llm_max_tokens: int = Field(default=400)
    llm_reasoning_effort: str = Field(default="medium")
    llm_max_retries: int = Field(default=0)

    history_window: int = Field(default=40)  # 20 user/assistant pairs
    system_prompt_key: str = Field(default="system_prompt")
    new_greeting_template: str = Field(
        default=(
            "Start the session by greeting me warmly using my name once. "
            "Never say nice to meet you or something similar. My name is {name}"
        )
    )
    return_greeting_template: str = Field(
        default=(
            "I am back in the chat. Please pick up the conversation where we "
            "left off and greet me warmly using my name once. My name is {name}"
        )
    )
    default_name: str = Field(default="there")

    cors_allow_methods: str = Field(default="GET, POST, OPTIONS")


config = Config()
