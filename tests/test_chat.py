"""Tests for the chat layer feeding the renderer."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from aichat.chat import build_messages, completion
from aichat.errors import ChatError, ProviderError, RenderConfigError
from aichat.providers import ChatProvider
from aichat.schemas.config import ModelProfile
from aichat.schemas.render import RenderConfig, RenderStatus
from conftest import make_console


class _FakeProvider(ChatProvider):
    """Scripted provider: yields ``deltas`` then optionally raises."""

    def __init__(self, deltas=(), *, error: Exception | None = None, reply: str = "") -> None:
        super().__init__(ModelProfile(model_name="fake", base_url="http://fake/v1"))
        self.deltas = list(deltas)
        self.error = error
        self.reply = reply
        self.calls: list[list[dict[str, str]]] = []

    async def complete(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply

    async def stream(self, messages):
        self.calls.append(messages)
        for delta in self.deltas:
            yield delta
        if self.error is not None:
            raise self.error


def _config(**overrides) -> RenderConfig:
    values = {"model_config_name": "fake", "model_name": "fake", "type_speed": 1000.0}
    values.update(overrides)
    return RenderConfig(**values)


class TestBuildMessages:
    def test_system_then_user(self):
        assert build_messages("sys", "hello") == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hello"},
        ]

    def test_empty_system_prompt_omitted(self):
        assert build_messages("", "hello") == [{"role": "user", "content": "hello"}]


class TestCompletion:
    @pytest.mark.asyncio
    async def test_stream_rendered_and_done(self):
        console = make_console()
        provider = _FakeProvider(["Hello", ", ", "world."])

        summary = await completion(
            "hi", provider=provider, system_prompt="be nice",
            render_config=_config(), console=console,
        )

        assert summary.status is RenderStatus.DONE
        assert summary.fragments == 3
        output = console.file.getvalue()
        assert "Hello, world." in output
        assert "Done" in output
        assert provider.calls[0][0] == {"role": "system", "content": "be nice"}

    @pytest.mark.asyncio
    async def test_pure_mode_prints_only_reply(self):
        console = make_console()
        await completion(
            "hi", provider=_FakeProvider(["just ", "text"]), system_prompt="",
            render_config=_config(pure=True), console=console,
        )
        assert console.file.getvalue() == "just text\n"

    @pytest.mark.asyncio
    async def test_non_streaming_sends_one_fragment(self):
        console = make_console()
        provider = _FakeProvider(reply="whole reply at once")

        summary = await completion(
            "hi", provider=provider, system_prompt="",
            render_config=_config(pure=True, disable_stream=True), console=console,
        )

        assert summary.fragments == 1
        assert console.file.getvalue() == "whole reply at once\n"

    @pytest.mark.asyncio
    async def test_transport_error_after_render(self):
        console = make_console()
        errors = io.StringIO()
        provider = _FakeProvider(["partial "], error=ProviderError("connection dropped"))

        with pytest.raises(ChatError) as exc_info:
            await completion(
                "hi", provider=provider, system_prompt="",
                render_config=_config(), console=console,
                error_console=Console(file=errors, color_system=None),
            )

        assert len(exc_info.value.errors) == 1
        output = console.file.getvalue()
        assert "partial " in output
        assert "Error" in output
        assert "❌ Error in chat request: connection dropped" in errors.getvalue()

    @pytest.mark.asyncio
    async def test_non_streaming_error(self):
        errors = io.StringIO()
        provider = _FakeProvider(error=TimeoutError("too slow"))

        with pytest.raises(ChatError):
            await completion(
                "hi", provider=provider, system_prompt="",
                render_config=_config(disable_stream=True), console=make_console(),
                error_console=Console(file=errors, color_system=None),
            )
        assert "too slow" in errors.getvalue()

    @pytest.mark.asyncio
    async def test_bad_render_config_before_request(self):
        provider = _FakeProvider(["never"])
        with pytest.raises(RenderConfigError):
            await completion(
                "hi", provider=provider, system_prompt="",
                render_config=_config(type_speed=0), console=make_console(),
            )
        assert provider.calls == []

