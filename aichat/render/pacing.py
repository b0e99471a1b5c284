"""Pacing engine for the typing effect.

Splits a fragment into sub-units (characters or words) and hands each
one to an async write callable, sleeping a fixed interval between
units. Word units end at a boundary character, which stays attached
to the word it terminates: ``"hello world!"`` becomes ``"hello "`` and
``"world!"``.
"""

from __future__ import annotations

import asyncio
import os
import string
import unicodedata
from collections.abc import Awaitable, Callable, Iterator

from aichat.errors import RenderConfigError
from aichat.schemas.render import OutputUnit, RenderConfig

WriteFn = Callable[[str], Awaitable[object]]

_SEPARATORS = frozenset(sep for sep in ("/", os.sep, os.altsep) if sep)
_ASCII_PUNCTUATION = frozenset(string.punctuation)


def is_word_boundary(ch: str) -> bool:
    """True for whitespace, punctuation (ASCII or Unicode) and path separators."""
    if ch.isspace() or ch in _ASCII_PUNCTUATION or ch in _SEPARATORS:
        return True
    return unicodedata.category(ch).startswith("P")


def iter_units(text: str, unit: OutputUnit) -> Iterator[tuple[str, bool]]:
    """Yield ``(piece, boundary_terminated)`` pairs in order.

    In word mode the flag is True when the piece ends on a boundary
    character and False for a trailing partial word. In character mode
    every piece is one character and the flag is always True.
    """
    if unit is OutputUnit.CHARACTER:
        for ch in text:
            yield ch, True
        return

    current: list[str] = []
    for ch in text:
        current.append(ch)
        if is_word_boundary(ch):
            yield "".join(current), True
            current.clear()
    if current:
        yield "".join(current), False


def interval_for_rate(rate: float) -> float:
    """Seconds between units for ``rate`` units per second.

    Raises:
        RenderConfigError: If the rate is zero or negative.
    """
    if rate <= 0:
        raise RenderConfigError(f"type speed must be positive, got {rate}")
    return 1.0 / rate


class Pacer:
    """Emits text to a sink at a fixed rate.

    The pause after a unit is owed rather than taken: it is slept just
    before the next unit is written, even when that unit arrives in a
    later fragment. The last unit of a render therefore ends without a
    delay. Word mode owes a pause after every boundary-terminated unit
    but not after a trailing partial word. Character mode owes one after
    every character. In bypass mode the whole fragment goes out in a
    single write.
    """

    def __init__(
        self,
        unit: OutputUnit,
        interval: float,
        *,
        bypass: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise RenderConfigError(f"pacing interval must be positive, got {interval}")
        self.unit = unit
        self.interval = interval
        self.bypass = bypass
        self._sleep = sleep
        self._owed = False

    @classmethod
    def from_config(cls, config: RenderConfig) -> Pacer:
        return cls(
            config.unit,
            interval_for_rate(config.type_speed),
            bypass=config.disable_stream,
        )

    @property
    def pause_owed(self) -> bool:
        """Whether the next unit waits one interval before it is written."""
        return self._owed

    async def emit(self, text: str, write: WriteFn) -> int:
        """Write ``text`` unit by unit. Returns the number of write events."""
        if not text:
            return 0

        if self.bypass:
            await write(text)
            return 1

        events = 0
        for piece, terminated in iter_units(text, self.unit):
            if self._owed:
                await self._sleep(self.interval)
            await write(piece)
            events += 1
            self._owed = terminated
        return events
