"""Exclusive terminal writer shared by the emission and status tasks.

Every write to the terminal goes through one OutputWriter. An
``asyncio.Lock`` is held only for the duration of a single write, so
content units and status redraws interleave at unit boundaries and
never inside one. The writer also tracks whether the status line is
still the last thing on screen, which decides if a status redraw can
happen in place or has to wait for the final summary.

Write failures (closed pipe, broken terminal) are logged and skipped:
terminal output is best effort and must never stall the pipeline.
"""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

logger = logging.getLogger(__name__)

# Carriage return + erase whole line, as rich's own live renderer does
_REWIND_LINE = Control((ControlType.CARRIAGE_RETURN,), (ControlType.ERASE_IN_LINE, 2))

_SINK_ERRORS = (OSError, ValueError)


class OutputWriter:
    """Serializes content and status output onto a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(highlight=False, emoji=False)
        self._lock = asyncio.Lock()
        self._status_open = False
        self._content_written = False
        self._line_dirty = False

    @property
    def console(self) -> Console:
        return self._console

    @property
    def can_redraw_in_place(self) -> bool:
        """Whether the status line is still open and the sink is a terminal."""
        return self._status_open and self._console.is_terminal

    @property
    def content_started(self) -> bool:
        return self._content_written

    async def write(self, text: str) -> bool:
        """Emit one content unit. Returns False if the sink rejected it."""
        async with self._lock:
            if self._status_open:
                self._status_open = False
                self._emit_plain("\n")
            ok = self._emit_plain(text)
            if text:
                self._content_written = True
                self._line_dirty = not text.endswith("\n")
            return ok

    async def draw_status(self, line: Text, *, in_place: bool = False) -> bool:
        """Draw the status line.

        With ``in_place`` the open status line is rewritten and left
        open. Without it, the line is appended on its own row (after
        closing any partial content line) and left open, so that later
        in-place redraws can update it. Returns False when an in-place
        redraw is not possible right now or the sink failed.
        """
        async with self._lock:
            if in_place:
                if not self.can_redraw_in_place:
                    return False
                return self._emit_status(line, rewind=True)
            if self._status_open:
                self._emit_plain("\n")
            elif self._line_dirty:
                self._emit_plain("\n")
                self._line_dirty = False
            ok = self._emit_status(line, rewind=False)
            self._status_open = True
            return ok

    async def finish(self) -> None:
        """Terminate the last line with a single trailing newline."""
        async with self._lock:
            self._emit_plain("\n")
            self._status_open = False
            self._line_dirty = False

    # ── Sink primitives (called under lock) ──────────────────────

    def _emit_plain(self, text: str) -> bool:
        try:
            self._console.print(
                text, end="", markup=False, highlight=False, emoji=False, soft_wrap=True,
            )
            self._console.file.flush()
        except _SINK_ERRORS as e:
            logger.debug("Skipped terminal write of %d chars: %s", len(text), e)
            return False
        return True

    def _emit_status(self, line: Text, *, rewind: bool) -> bool:
        try:
            if rewind:
                self._console.control(_REWIND_LINE)
            self._console.print(line, end="", soft_wrap=True)
            self._console.file.flush()
        except _SINK_ERRORS as e:
            logger.debug("Skipped status line redraw: %s", e)
            return False
        return True
