"""Render supervisor: owns the tasks that turn a fragment stream into output.

``start()`` spawns a small fixed set of tasks and returns two handles:

- RenderChannel: the ingestion side. The producer sends Content and
  SetStatus messages in order, then closes it (or sends Stop).
- RenderHandle: the completion side. Awaiting it returns once every
  queued fragment has been emitted, the final status line has been
  drawn and the trailing newline written.

Internally a message loop classifies messages (content goes to the
ContentQueue, status changes go to the StatusIndicator), an emission
loop drains the queue through the Pacer, and in decorated mode a status
task refreshes the status line on its own timer. The three only share
the OutputWriter, which serializes individual writes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from typing import Any

from rich.console import Console

from aichat.errors import ChannelClosedError, RenderConfigError, RenderError
from aichat.render.pacing import Pacer
from aichat.render.queue import ContentQueue
from aichat.render.status import RenderState, StatusIndicator
from aichat.render.writer import OutputWriter
from aichat.schemas.render import (
    Content,
    RenderConfig,
    RenderMessage,
    RenderStatus,
    RenderSummary,
    SetStatus,
    Stop,
)

logger = logging.getLogger(__name__)


class RenderChannel:
    """Ordered ingestion channel for one render.

    Closing is the normal termination signal. ``close()`` and ``stop()``
    are idempotent; sending content or status after closure raises
    ChannelClosedError.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[RenderMessage | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, text: str) -> None:
        """Queue one content fragment."""
        self._check_open()
        await self._queue.put(Content(text))

    async def set_status(self, status: RenderStatus) -> None:
        self._check_open()
        await self._queue.put(SetStatus(RenderStatus(status)))

    async def stop(self) -> None:
        """Send an explicit Stop. A no-op once the channel is closed."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(Stop())

    def close(self) -> None:
        """Signal end of input. A no-op once the channel is closed."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def __aenter__(self) -> RenderChannel:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.close()

    async def _receive(self) -> RenderMessage | None:
        return await self._queue.get()

    def _detach(self) -> None:
        """Called by the supervisor on exit so late senders fail loudly."""
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise ChannelClosedError("render channel is closed")


class RenderHandle:
    """Awaitable completion handle. Resolves exactly once with a RenderSummary."""

    def __init__(self, task: asyncio.Task[RenderSummary]) -> None:
        self._task = task

    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> RenderSummary:
        return await self._task

    def __await__(self) -> Generator[Any, None, RenderSummary]:
        return self._task.__await__()


class ResponseRenderer:
    """Supervises the paced rendering of one chat response.

    The configuration is validated here, before any task exists, so a
    bad pacing rate surfaces to the caller as RenderConfigError.
    """

    def __init__(
        self,
        config: RenderConfig,
        *,
        console: Console | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        if config.refresh_interval <= 0:
            raise RenderConfigError(
                f"refresh interval must be positive, got {config.refresh_interval}"
            )
        self._config = config
        self._pacer = Pacer.from_config(config)
        self._writer = writer or OutputWriter(console)
        self._queue = ContentQueue()
        self._state = RenderState()
        self._status: StatusIndicator | None = None
        self._started = False
        self._fragments = 0
        self._characters = 0

    @property
    def config(self) -> RenderConfig:
        return self._config

    def start(self) -> tuple[RenderChannel, RenderHandle]:
        """Spawn the render tasks on the running loop."""
        if self._started:
            raise RuntimeError("ResponseRenderer can only be started once")
        self._started = True

        self._state = RenderState()
        if not self._config.pure:
            self._status = StatusIndicator(self._config, self._writer, state=self._state)

        channel = RenderChannel()
        task = asyncio.get_running_loop().create_task(
            self._run(channel), name="aichat-render",
        )
        return channel, RenderHandle(task)

    # ── Task bodies ───────────────────────────────────────────────

    async def _run(self, channel: RenderChannel) -> RenderSummary:
        ready = asyncio.Event()
        workers: list[asyncio.Task[Any]] = []
        status_task: asyncio.Task[RenderState] | None = None

        if self._status is not None:
            status_task = asyncio.create_task(
                self._status.run(ready), name="aichat-render-status",
            )
            workers.append(status_task)
        else:
            ready.set()

        pipeline = [
            asyncio.create_task(self._interpret(channel), name="aichat-render-messages"),
            asyncio.create_task(self._emit(ready), name="aichat-render-emit"),
        ]
        workers.extend(pipeline)

        try:
            await _supervise(workers, pipeline)
            if self._status is not None and status_task is not None:
                self._status.finish()
                await status_task
            await self._writer.finish()
        except Exception as e:
            logger.debug("Render task failed: %r", e)
            await _cancel_all(workers)
            await self._writer.finish()
            raise RenderError(f"rendering failed: {e}") from e
        finally:
            channel._detach()
            await _cancel_all(workers)

        logger.debug(
            "Render complete: %s, %d fragments, %d chars",
            self._state.status, self._fragments, self._characters,
        )
        return RenderSummary(
            status=self._state.status,
            elapsed=self._state.elapsed,
            fragments=self._fragments,
            characters=self._characters,
        )

    async def _interpret(self, channel: RenderChannel) -> None:
        """Message loop: route each message until closure or Stop."""
        try:
            while True:
                message = await channel._receive()
                if message is None or isinstance(message, Stop):
                    logger.debug("Render channel closed")
                    break
                if isinstance(message, Content):
                    if message.text:
                        self._queue.enqueue(message.text)
                elif isinstance(message, SetStatus):
                    self._apply_status(message.status)
        finally:
            self._queue.close()

    def _apply_status(self, status: RenderStatus) -> None:
        if self._status is not None:
            self._status.notify(status)
        else:
            # Pure mode: no status task, the state is only bookkeeping
            self._state.transition(status)

    async def _emit(self, ready: asyncio.Event) -> None:
        """Emission loop: drain the queue through the pacer."""
        await ready.wait()
        while (fragment := await self._queue.dequeue()) is not None:
            await self._pacer.emit(fragment, self._write)
            self._fragments += 1
        logger.debug("Content queue drained")

    async def _write(self, text: str) -> None:
        await self._writer.write(text)
        self._characters += len(text)


async def _supervise(
    workers: list[asyncio.Task[Any]], pipeline: list[asyncio.Task[Any]],
) -> None:
    """Wait for the pipeline tasks, failing fast if any worker fails.

    The status task is watched for failure but not waited on: it only
    exits after ``finish()``, which the caller sends once this returns.
    """
    pending = set(workers)
    while not all(task.done() for task in pipeline):
        done, pending = await asyncio.wait(
            pending, return_when=asyncio.FIRST_COMPLETED,
        )
        for task in done:
            if task.cancelled():
                raise RenderError(f"{task.get_name()} was cancelled")
            exc = task.exception()
            if exc is not None:
                raise exc


async def _cancel_all(tasks: list[asyncio.Task[Any]]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def start_render(
    config: RenderConfig,
    *,
    console: Console | None = None,
    writer: OutputWriter | None = None,
) -> tuple[RenderChannel, RenderHandle]:
    """Validate ``config`` and start rendering. Must run inside an event loop."""
    return ResponseRenderer(config, console=console, writer=writer).start()
