"""Chat completion: consume a provider stream and feed the renderer.

This is the producer side of the rendering pipeline. Each delta from
the provider becomes one Content message. When the stream ends, the
status is set to Done, or to Error if the transport failed, and the
channel is closed. Errors are printed only after the renderer has
finished, so diagnostics never interleave with paced output.
"""

from __future__ import annotations

import logging

from rich.console import Console

from aichat.errors import ChannelClosedError, ChatError
from aichat.providers import TRANSPORT_ERRORS, ChatProvider
from aichat.render import RenderChannel, ResponseRenderer
from aichat.schemas.config import ChatSettings, ModelProfile
from aichat.schemas.render import RenderConfig, RenderStatus, RenderSummary

logger = logging.getLogger(__name__)


def build_render_config(settings: ChatSettings, model: ModelProfile) -> RenderConfig:
    """Renderer settings for one invocation."""
    return RenderConfig(
        pure=settings.pure,
        model_config_name=settings.model or "",
        model_name=model.model_name or "",
        prompt_config_name=settings.prompt or "",
        type_speed=settings.type_speed,
        unit=settings.output_unit,
        disable_stream=settings.disable_stream,
    )


def build_messages(system_prompt: str, user_input: str) -> list[dict[str, str]]:
    """OpenAI-format messages: optional system prompt, then the user turn."""
    messages: list[dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_input})
    return messages


async def completion(
    user_input: str,
    *,
    provider: ChatProvider,
    system_prompt: str,
    render_config: RenderConfig,
    console: Console | None = None,
    error_console: Console | None = None,
) -> RenderSummary:
    """Send one chat request and render the reply.

    Returns:
        The RenderSummary of the finished render.

    Raises:
        RenderConfigError: If the render configuration is invalid
            (raised before any request is made).
        ChatError: If the transport reported errors; they have already
            been printed to ``error_console``.
        RenderError: If the renderer itself failed.
    """
    renderer = ResponseRenderer(render_config, console=console)
    messages = build_messages(system_prompt, user_input)
    errors: list[Exception] = []

    channel, handle = renderer.start()
    try:
        await _forward(provider, messages, channel, render_config.disable_stream, errors)
    except ChannelClosedError:
        # Renderer stopped early; awaiting the handle raises its failure
        logger.debug("Renderer closed the channel before the stream ended")
    finally:
        channel.close()
        logger.debug("Render channel closed by producer")

    summary = await handle
    logger.debug("Response render exit: %s", summary.status)

    if errors:
        err = error_console or Console(stderr=True)
        for e in errors:
            err.print(f"❌ Error in chat request: {e}", style="red", markup=False)
        raise ChatError("failed to send request.", errors)
    return summary


async def _forward(
    provider: ChatProvider,
    messages: list[dict[str, str]],
    channel: RenderChannel,
    disable_stream: bool,
    errors: list[Exception],
) -> None:
    if disable_stream:
        logger.debug("Start chat request")
        try:
            content = await provider.complete(messages)
        except TRANSPORT_ERRORS as e:
            errors.append(e)
        else:
            logger.debug("Received chat response")
            await channel.send(content or "null")
    else:
        logger.debug("Start receiving stream")
        try:
            async for delta in provider.stream(messages):
                await channel.send(delta)
        except TRANSPORT_ERRORS as e:
            errors.append(e)
        logger.debug("Stream ended")

    await channel.set_status(RenderStatus.ERROR if errors else RenderStatus.DONE)
