"""Incremental response rendering.

Paced, status-decorated terminal output for a streamed chat response.
Callers use ``start_render()`` (or ``ResponseRenderer``) to get an
ingestion channel and a completion handle.
"""

from aichat.render.pacing import Pacer, interval_for_rate, is_word_boundary, iter_units
from aichat.render.queue import ContentQueue
from aichat.render.status import (
    RenderState,
    StatusIndicator,
    format_elapsed,
    render_status_line,
)
from aichat.render.supervisor import (
    RenderChannel,
    RenderHandle,
    ResponseRenderer,
    start_render,
)
from aichat.render.writer import OutputWriter

__all__ = [
    "ContentQueue",
    "OutputWriter",
    "Pacer",
    "RenderChannel",
    "RenderHandle",
    "RenderState",
    "ResponseRenderer",
    "StatusIndicator",
    "format_elapsed",
    "interval_for_rate",
    "is_word_boundary",
    "iter_units",
    "render_status_line",
    "start_render",
]
