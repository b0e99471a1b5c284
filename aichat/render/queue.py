"""FIFO buffer of fragments waiting to be paced.

Decouples the arrival rate of fragments from the rendering rate. The
message loop enqueues, the emission loop dequeues; ``close()`` marks
the end of input so ``dequeue()`` can report exhaustion once the
buffer has drained.
"""

from __future__ import annotations

import asyncio
from collections import deque


class ContentQueue:
    """Unbounded, strictly ordered fragment queue for a single consumer."""

    def __init__(self) -> None:
        self._items: deque[str] = deque()
        self._available = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._items)

    def enqueue(self, fragment: str) -> None:
        if self._closed:
            raise RuntimeError("enqueue on a closed ContentQueue")
        self._items.append(fragment)
        self._available.set()

    def is_empty(self) -> bool:
        return not self._items

    def close(self) -> None:
        """Mark end of input. Safe to call more than once."""
        self._closed = True
        self._available.set()

    async def dequeue(self) -> str | None:
        """Next fragment in arrival order, or None once closed and drained."""
        while not self._items:
            if self._closed:
                return None
            self._available.clear()
            await self._available.wait()
        return self._items.popleft()
