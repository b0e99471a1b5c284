"""Chat-completion providers.

All model traffic goes through a ChatProvider; LiteLLMProvider is the
only concrete implementation.
"""

from aichat.providers.base import ChatProvider
from aichat.providers.litellm_provider import TRANSPORT_ERRORS, LiteLLMProvider

__all__ = [
    "ChatProvider",
    "LiteLLMProvider",
    "TRANSPORT_ERRORS",
]
