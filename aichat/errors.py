"""Exception hierarchy for aichat."""


class AichatError(Exception):
    """Base exception for all application-specific errors."""


class ConfigError(AichatError):
    """Raised when a stored or resolved configuration is unusable."""


class RenderConfigError(AichatError, ValueError):
    """Raised when a RenderConfig cannot drive the renderer (e.g. rate <= 0)."""


class ChannelClosedError(AichatError):
    """Raised when content is sent to a closed render channel."""


class RenderError(AichatError):
    """Raised from the completion handle when an internal render task failed."""


class ProviderError(AichatError):
    """Raised when the chat-completion transport rejects a request."""


class ChatError(AichatError):
    """Raised after rendering when the chat stream reported errors."""

    def __init__(self, message: str, errors: list[Exception] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
