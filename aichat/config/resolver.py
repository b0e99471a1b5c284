"""Merge command-line options with the stored configuration.

Priority: command line > config file. Boolean flags are enabled when
either side enables them.
"""

from __future__ import annotations

from aichat.errors import ConfigError
from aichat.schemas.config import (
    AppConfig,
    ChatSettings,
    ModelProfile,
    PromptProfile,
)
from aichat.schemas.render import OutputUnit


def resolve_settings(
    file_config: AppConfig,
    *,
    model: str | None = None,
    prompt: str | None = None,
    pure: bool = False,
    disable_stream: bool = False,
    verbose: bool = False,
    type_speed: float | None = None,
    output_unit: OutputUnit | None = None,
) -> ChatSettings:
    """Build the effective settings for one chat invocation."""
    return ChatSettings(
        model=model or file_config.default_model,
        prompt=prompt or file_config.default_prompt,
        pure=pure or file_config.pure,
        disable_stream=disable_stream or file_config.disable_stream,
        verbose=verbose or file_config.verbose,
        type_speed=type_speed if type_speed is not None else file_config.type_speed,
        output_unit=output_unit or file_config.output_unit,
    )


def resolve_chat_profiles(
    file_config: AppConfig, settings: ChatSettings,
) -> tuple[ModelProfile, PromptProfile]:
    """Look up the model and prompt profiles named by ``settings``.

    Raises:
        ConfigError: If a name is missing or refers to an unknown profile,
            or if the model profile has no model name or base URL.
    """
    if not settings.model:
        raise ConfigError("No model specified and no default model set.")
    model = file_config.models.get(settings.model)
    if model is None:
        raise ConfigError(f"Model configuration '{settings.model}' not found.")
    if not model.model_name:
        raise ConfigError(f"Model configuration '{settings.model}' has no model name.")
    if not model.base_url:
        raise ConfigError(f"Model configuration '{settings.model}' has no base URL.")

    if not settings.prompt:
        raise ConfigError("No prompt specified and no default prompt set.")
    prompt = file_config.prompts.get(settings.prompt)
    if prompt is None:
        raise ConfigError(f"Prompt configuration '{settings.prompt}' not found.")

    return model, prompt
