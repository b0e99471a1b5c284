"""Shared fixtures for the aichat test suite."""

from __future__ import annotations

import io
import time

import pytest
from rich.console import Console
from rich.text import Text

from aichat.render.writer import OutputWriter


def make_console(*, terminal: bool = False) -> Console:
    """A plain-text Rich console writing into a StringIO."""
    return Console(
        file=io.StringIO(),
        width=200,
        color_system=None,
        force_terminal=terminal,
        highlight=False,
        emoji=False,
    )


class RecordingWriter(OutputWriter):
    """OutputWriter that timestamps every content write and status draw."""

    def __init__(self, console: Console | None = None, *, fail_on: str | None = None) -> None:
        super().__init__(console or make_console())
        self.events: list[tuple[str, str, float]] = []
        self.fail_on = fail_on

    async def write(self, text: str) -> bool:
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("sink exploded")
        ok = await super().write(text)
        self.events.append(("content", text, time.monotonic()))
        return ok

    async def draw_status(self, line: Text, *, in_place: bool = False) -> bool:
        ok = await super().draw_status(line, in_place=in_place)
        if ok:
            self.events.append(("status", line.plain, time.monotonic()))
        return ok

    @property
    def content(self) -> list[str]:
        return [text for kind, text, _ in self.events if kind == "content"]

    @property
    def status_lines(self) -> list[str]:
        return [text for kind, text, _ in self.events if kind == "status"]

    @property
    def output(self) -> str:
        return self.console.file.getvalue()


@pytest.fixture
def recording_writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def terminal_writer() -> RecordingWriter:
    return RecordingWriter(make_console(terminal=True))


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the config store at a temporary directory."""
    monkeypatch.setenv("AICHAT_CONFIG_DIR", str(tmp_path))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return tmp_path
