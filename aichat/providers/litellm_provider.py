"""LiteLLM adapter implementing the ChatProvider interface.

Model profiles describe OpenAI-compatible endpoints (base URL, model
name, API key), so every call is routed through LiteLLM's ``openai``
provider with a custom ``api_base``. Opening a request retries
transient failures with exponential backoff; errors raised while a
stream is already being consumed are left to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import litellm

# Suppress LiteLLM's "Give Feedback / Get Help" and "Provider List" banners
litellm.suppress_debug_info = True

from aichat.errors import ProviderError
from aichat.keys import mask_key
from aichat.providers.base import ChatProvider
from aichat.schemas.config import ModelProfile

logger = logging.getLogger(__name__)

# Max attempts for opening a request
_MAX_RETRIES = 3
_BASE_BACKOFF = 1.0  # seconds

_RETRYABLE_ERRORS = (
    litellm.RateLimitError,
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
    litellm.APIConnectionError,
    litellm.Timeout,
)

# Errors a consumer should treat as a failed stream rather than a crash
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    ProviderError,
    litellm.APIError,
    *_RETRYABLE_ERRORS,
    TimeoutError,
    ConnectionError,
)


# Substrings that identify a transient failure, checked in order
_REASON_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("rate", "429"), "rate limit"),
    (("timeout", "timed out"), "timeout"),
    (("503", "unavailable"), "service unavailable"),
    (("500", "internal"), "server error"),
    (("connection",), "connection error"),
)


def _short_error_reason(error: Exception) -> str:
    """Short label for a retry log line."""
    if isinstance(error, TimeoutError):
        return "timeout"
    text = str(error).lower()
    for markers, label in _REASON_MARKERS:
        if any(marker in text for marker in markers):
            return label
    return str(error)[:80]


class LiteLLMProvider(ChatProvider):
    """Chat provider backed by ``litellm.acompletion``."""

    def __init__(
        self,
        profile: ModelProfile,
        *,
        api_key: str = "",
        timeout: float = 120.0,
        max_retries: int = _MAX_RETRIES,
    ) -> None:
        super().__init__(profile, api_key=api_key)
        self._timeout = timeout
        self._max_retries = max(1, max_retries)

    async def complete(self, messages: list[dict[str, str]]) -> str:
        kwargs = self._build_completion_kwargs(messages)
        response = await self._call_with_retry(kwargs)
        if not response.choices:
            return ""
        message = response.choices[0].message
        return (message.content or "") if message else ""

    async def stream(self, messages: list[dict[str, str]]) -> AsyncIterator[str]:
        kwargs = self._build_completion_kwargs(messages)
        kwargs["stream"] = True
        response = await self._call_with_retry(kwargs)

        async for chunk in response:
            if not chunk.choices or not chunk.choices[0].delta:
                continue
            delta = chunk.choices[0].delta.content or ""
            if delta:
                yield delta

    def _build_completion_kwargs(self, messages: list[dict[str, str]]) -> dict:
        """Build the kwargs dict for litellm.acompletion."""
        kwargs: dict = {
            "model": self.model_name,
            "messages": messages,
            "timeout": float(self._timeout),
        }
        if self._api_key:
            kwargs["api_key"] = self._api_key
        if self.base_url:
            kwargs["api_base"] = self.base_url
            kwargs["custom_llm_provider"] = "openai"
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        logger.debug(
            "Request to %s at %s (api key %s)",
            self.model_name, self.base_url or "default endpoint",
            mask_key(self._api_key) or "unset",
        )
        return kwargs

    async def _call_with_retry(self, kwargs: dict):
        """Call litellm.acompletion with exponential backoff retry.

        Retries on transient errors (rate limits, server errors,
        timeouts). Authentication and bad-request errors are raised
        immediately.

        Raises:
            TimeoutError: If every attempt timed out.
            ProviderError: If the request is rejected or all retries fail.
        """
        last_error: Exception | None = None

        for attempt in range(self._max_retries):
            try:
                return await litellm.acompletion(**kwargs)
            except TimeoutError:
                last_error = TimeoutError(
                    f"Request to {self.model_name} timed out after {kwargs.get('timeout')}s "
                    f"(attempt {attempt + 1}/{self._max_retries})"
                )
            except litellm.AuthenticationError:
                raise ProviderError(
                    f"Authentication failed for {self.model_name}. "
                    "Check the api key of the model configuration or OPENAI_API_KEY."
                ) from None
            except litellm.BadRequestError as e:
                raise ProviderError(f"Bad request to {self.model_name}: {e}") from e
            except _RETRYABLE_ERRORS as e:
                last_error = e

            if attempt < self._max_retries - 1:
                backoff = _BASE_BACKOFF * (2**attempt)
                logger.warning(
                    "Retry %d/%d for %s (%s, backoff: %.1fs)",
                    attempt + 1, self._max_retries, self.model_name,
                    _short_error_reason(last_error), backoff,
                )
                await asyncio.sleep(backoff)

        if isinstance(last_error, TimeoutError):
            raise last_error
        raise ProviderError(
            f"Request to {self.model_name} failed after {self._max_retries} "
            f"attempts: {last_error}"
        ) from last_error
