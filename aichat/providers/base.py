"""Abstract base class for chat-completion providers.

The chat layer talks to models only through this interface, which
keeps the rendering pipeline independent of any particular transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from aichat.schemas.config import ModelProfile


class ChatProvider(ABC):
    """A model that can answer a conversation, whole or streamed."""

    def __init__(self, profile: ModelProfile, *, api_key: str = "") -> None:
        self._profile = profile
        self._api_key = api_key

    @property
    def model_name(self) -> str:
        """Model identifier sent to the API."""
        return self._profile.model_name or ""

    @property
    def base_url(self) -> str:
        return self._profile.base_url or ""

    @property
    def temperature(self) -> float | None:
        return self._profile.temperature

    @abstractmethod
    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Send a non-streaming request and return the reply text.

        Raises:
            ProviderError: If the request is rejected or fails.
        """

    @abstractmethod
    def stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        """Yield reply deltas as they arrive.

        Transport failures during iteration propagate out of the
        iterator; the caller decides whether they are fatal.
        """
