"""Render pipeline schemas.

Defines the immutable RenderConfig snapshot handed to the renderer, the
lifecycle status enum shown on the status line, and the messages that
flow over the ingestion channel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class OutputUnit(StrEnum):
    """Granularity of the typing effect."""

    CHARACTER = "character"
    WORD = "word"


class RenderStatus(StrEnum):
    """Lifecycle state shown by the status indicator.

    RESPONDING is the only initial state. DONE and ERROR are terminal:
    once reached, no further transition happens for the invocation.
    """

    RESPONDING = "responding"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not RenderStatus.RESPONDING


class RenderConfig(BaseModel):
    """Immutable configuration snapshot for one chat invocation."""

    # model_* field names would otherwise collide with pydantic's namespace
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    pure: bool = Field(
        default=False, description="Suppress the status line and all styling"
    )
    model_config_name: str = Field(default="", description="Model profile name")
    model_name: str = Field(default="", description="Resolved model identifier")
    prompt_config_name: str = Field(default="", description="Prompt profile name")
    type_speed: float = Field(
        default=30.0, description="Target emission rate in units per second"
    )
    unit: OutputUnit = Field(
        default=OutputUnit.WORD, description="Pacing granularity"
    )
    disable_stream: bool = Field(
        default=False, description="Bypass pacing and emit each fragment at once"
    )
    refresh_interval: float = Field(
        default=1.0, description="Minimum seconds between timer status redraws"
    )


# ── Ingestion channel messages ────────────────────────────────────


@dataclass(frozen=True)
class Content:
    """One fragment of the response, rendered in arrival order."""

    text: str


@dataclass(frozen=True)
class SetStatus:
    """Request a lifecycle transition on the status line."""

    status: RenderStatus


@dataclass(frozen=True)
class Stop:
    """Explicit end of input; equivalent to closing the channel."""


RenderMessage = Content | SetStatus | Stop


class RenderSummary(BaseModel):
    """Outcome of a finished render, returned by the completion handle."""

    status: RenderStatus = Field(description="Last status recorded for the invocation")
    elapsed: float = Field(ge=0.0, description="Seconds from start to completion")
    fragments: int = Field(ge=0, description="Number of content fragments rendered")
    characters: int = Field(ge=0, description="Number of characters emitted")
