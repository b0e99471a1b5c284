"""Status indicator: lifecycle state, elapsed time and labels on one line.

The StatusIndicator task owns the RenderState exclusively. Other tasks
request transitions through ``notify()``, which only enqueues a signal;
the indicator applies it, enforces the state machine and redraws. A
timer refreshes the elapsed counter no more often than the configured
refresh interval.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from rich.text import Text

from aichat.render.writer import OutputWriter
from aichat.schemas.render import RenderConfig, RenderStatus

logger = logging.getLogger(__name__)

_STATUS_GLYPHS: dict[RenderStatus, tuple[str, str]] = {
    RenderStatus.RESPONDING: ("▸", "bold cyan"),
    RenderStatus.DONE: ("✓", "bold green"),
    RenderStatus.ERROR: ("✗", "bold red"),
}

_STATUS_LABELS: dict[RenderStatus, str] = {
    RenderStatus.RESPONDING: "Responding",
    RenderStatus.DONE: "Done",
    RenderStatus.ERROR: "Error",
}

# Sentinel pushed by finish(); distinct from any RenderStatus
_FINAL = object()


def format_elapsed(seconds: float) -> str:
    """Format a duration as ``mm:ss`` (minutes keep growing past 99)."""
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"


@dataclass
class RenderState:
    """Mutable state owned by the status task."""

    status: RenderStatus = RenderStatus.RESPONDING
    started_at: float = field(default_factory=time.monotonic)
    last_refresh: float | None = None
    redraws: int = 0
    history: list[RenderStatus] = field(
        default_factory=lambda: [RenderStatus.RESPONDING]
    )

    def __post_init__(self) -> None:
        if self.status is not RenderStatus.RESPONDING:
            raise ValueError(f"RenderState must start as responding, not {self.status}")

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def transition(self, status: RenderStatus) -> bool:
        """Apply a transition. Returns True if the status changed."""
        if self.status.is_terminal:
            logger.debug("Ignoring %s: status already %s", status, self.status)
            return False
        if status == self.status:
            return False
        self.status = status
        self.history.append(status)
        return True


def render_status_line(state: RenderState, config: RenderConfig) -> Text:
    """Build the status line for ``state``: glyph, elapsed time, labels."""
    glyph, style = _STATUS_GLYPHS[state.status]
    line = Text()
    line.append(f" {glyph} ", style=style)
    line.append(_STATUS_LABELS[state.status], style=style)
    line.append("  ")
    line.append(format_elapsed(state.elapsed), style="dim")
    if config.model_config_name or config.model_name:
        line.append("  model: ", style="dim")
        line.append(config.model_config_name, style="bold blue")
        if config.model_name:
            line.append(f"({config.model_name})", style="bold cyan")
    if config.prompt_config_name:
        line.append("  prompt: ", style="dim")
        line.append(config.prompt_config_name, style="bold blue")
    return line


class StatusIndicator:
    """Draws and refreshes the status line for one invocation."""

    def __init__(
        self,
        config: RenderConfig,
        writer: OutputWriter,
        *,
        state: RenderState | None = None,
    ) -> None:
        self._config = config
        self._writer = writer
        self._state = state or RenderState()
        self._signals: asyncio.Queue[object] = asyncio.Queue()
        self._finishing = False

    @property
    def state(self) -> RenderState:
        return self._state

    def render(self) -> Text:
        return render_status_line(self._state, self._config)

    def notify(self, status: RenderStatus) -> None:
        """Request a status transition (applied by the status task)."""
        self._signals.put_nowait(status)

    def finish(self) -> None:
        """Ask the status task for its final redraw and exit."""
        if not self._finishing:
            self._finishing = True
            self._signals.put_nowait(_FINAL)

    async def draw_initial(self) -> None:
        await self._draw(in_place=False)
        logger.debug("Status line drawn")

    async def run(self, ready: asyncio.Event | None = None) -> RenderState:
        """Status task body. Returns the final state after the last redraw.

        Draws the status line first and sets ``ready`` so content may
        follow. Then alternates between timer refreshes and transition
        signals until ``finish()`` is called.
        """
        try:
            await self.draw_initial()
        finally:
            if ready is not None:
                ready.set()

        while True:
            try:
                signal = await asyncio.wait_for(
                    self._signals.get(), timeout=self._config.refresh_interval,
                )
            except TimeoutError:
                await self._tick()
                continue

            if signal is _FINAL:
                break
            if self._state.transition(signal):
                logger.debug("Status -> %s", self._state.status)
                # Forced; deferred to the final redraw if content owns the line
                await self._draw(in_place=True)

        await self._final_redraw()
        return self._state

    async def _tick(self) -> None:
        if self._state.last_refresh is not None:
            since = time.monotonic() - self._state.last_refresh
            if since < self._config.refresh_interval:
                return
        await self._draw(in_place=True)

    async def _final_redraw(self) -> None:
        if not await self._draw(in_place=True):
            await self._draw(in_place=False)
        logger.debug("Final status drawn: %s", self._state.status)

    async def _draw(self, *, in_place: bool) -> bool:
        drawn = await self._writer.draw_status(self.render(), in_place=in_place)
        if drawn:
            self._state.last_refresh = time.monotonic()
            self._state.redraws += 1
        return drawn
