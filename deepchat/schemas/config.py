"""Client configuration and per-session request settings.

ChatConfig is loaded once from defaults.toml (plus CLI overrides).
ChatSettings holds the values the user can change mid-session with
slash commands.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 1.5
MIN_MAX_TOKENS = 1
MAX_MAX_TOKENS = 8192


class ChatConfig(BaseModel):
    """Endpoint, model and defaults for the chat client."""

    api_base: str = Field(
        default="https://api.deepseek.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    model: str = Field(default="deepseek-chat", description="Model identifier")
    api_key_env: str = Field(
        default="DEEPSEEK_API_KEY",
        description="Environment variable name holding the API key",
    )
    system_prompt: str = Field(
        default="You are a helpful assistant",
        description="System message that opens every conversation",
    )
    timeout: float | None = Field(
        default=None, gt=0, description="Network timeout in seconds (None = wait forever)"
    )
    default_temperature: float = Field(
        default=1.0, ge=MIN_TEMPERATURE, le=MAX_TEMPERATURE,
        description="Initial sampling temperature",
    )
    default_max_tokens: int = Field(
        default=4096, ge=MIN_MAX_TOKENS, le=MAX_MAX_TOKENS,
        description="Initial completion length limit",
    )

    @property
    def completions_url(self) -> str:
        return self.api_base.rstrip("/") + "/chat/completions"


class ChatSettings(BaseModel):
    """Sampling settings sent with every request."""

    model_config = ConfigDict(validate_assignment=True)

    temperature: float = Field(
        default=1.0, ge=MIN_TEMPERATURE, le=MAX_TEMPERATURE,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=4096, ge=MIN_MAX_TOKENS, le=MAX_MAX_TOKENS,
        description="Maximum completion length in tokens",
    )

    @classmethod
    def from_config(cls, config: ChatConfig) -> ChatSettings:
        return cls(
            temperature=config.default_temperature,
            max_tokens=config.default_max_tokens,
        )
