"""aichat schema definitions.

Pydantic v2 models and message types shared by the renderer, the chat
layer, and the configuration store.
"""

from aichat.schemas.config import (
    AppConfig,
    ChatSettings,
    ModelProfile,
    PromptProfile,
)
from aichat.schemas.render import (
    Content,
    OutputUnit,
    RenderConfig,
    RenderMessage,
    RenderStatus,
    RenderSummary,
    SetStatus,
    Stop,
)

__all__ = [
    "AppConfig",
    "ChatSettings",
    "Content",
    "ModelProfile",
    "OutputUnit",
    "PromptProfile",
    "RenderConfig",
    "RenderMessage",
    "RenderStatus",
    "RenderSummary",
    "SetStatus",
    "Stop",
]
