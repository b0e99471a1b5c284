"""Configuration schemas for stored model and prompt profiles.

The on-disk format is JSON with kebab-case keys for the top-level
settings, matching config files written by earlier releases.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from aichat.schemas.render import OutputUnit

DEFAULT_MODEL_PROFILE = "sample_model_gpt"
DEFAULT_PROMPT_PROFILE = "sample_prompt"

DEFAULT_SYSTEM_PROMPT = """You are a terminal assistant.
You are giving help to user in the terminal.
Give concise responses whenever possible.
Because of terminal cannot render markdown, DO NOT contain any markdown syntax(`,```, #, ...) in your response, use plain text only.
"""


class ModelProfile(BaseModel):
    """Connection settings for one OpenAI-compatible chat model."""

    model_config = ConfigDict(protected_namespaces=())

    model_name: str | None = Field(default=None, description="Model identifier")
    base_url: str | None = Field(default=None, description="API base URL")
    api_key: str | None = Field(default=None, description="API key (stored as-is)")
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature"
    )

    def merge_with(self, base: ModelProfile) -> ModelProfile:
        """Fill unset fields from ``base``; values on ``self`` win."""
        return ModelProfile(
            model_name=self.model_name if self.model_name is not None else base.model_name,
            base_url=self.base_url if self.base_url is not None else base.base_url,
            api_key=self.api_key if self.api_key is not None else base.api_key,
            temperature=(
                self.temperature if self.temperature is not None else base.temperature
            ),
        )


class PromptProfile(BaseModel):
    """A named system prompt."""

    content: str = Field(default="", description="System prompt text")

    def merge_with(self, base: PromptProfile) -> PromptProfile:
        return PromptProfile(content=self.content or base.content)


class AppConfig(BaseModel):
    """Everything persisted in config.json."""

    model_config = ConfigDict(populate_by_name=True)

    models: dict[str, ModelProfile] = Field(default_factory=dict)
    prompts: dict[str, PromptProfile] = Field(default_factory=dict)
    default_model: str | None = Field(default=None, alias="default-model")
    default_prompt: str | None = Field(default=None, alias="default-prompt")
    disable_stream: bool = Field(default=False, alias="disable-stream")
    pure: bool = False
    verbose: bool = False
    type_speed: float = Field(default=30.0, gt=0.0, alias="type-speed")
    output_unit: OutputUnit = Field(default=OutputUnit.WORD, alias="output-unit")

    @classmethod
    def with_defaults(cls) -> AppConfig:
        """Configuration used when no config file exists yet."""
        return cls(
            models={
                DEFAULT_MODEL_PROFILE: ModelProfile(
                    model_name="gpt-5-mini",
                    base_url="https://api.openai.com/v1",
                ),
            },
            prompts={
                DEFAULT_PROMPT_PROFILE: PromptProfile(content=DEFAULT_SYSTEM_PROMPT),
            },
            default_model=DEFAULT_MODEL_PROFILE,
            default_prompt=DEFAULT_PROMPT_PROFILE,
        )


class ChatSettings(BaseModel):
    """Effective settings for one invocation after merging CLI and file."""

    model: str | None = None
    prompt: str | None = None
    pure: bool = False
    disable_stream: bool = False
    verbose: bool = False
    type_speed: float = 30.0
    output_unit: OutputUnit = OutputUnit.WORD
