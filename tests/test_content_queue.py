"""Tests for the ContentQueue."""

from __future__ import annotations

import asyncio

import pytest

from aichat.render.queue import ContentQueue


class TestContentQueue:
    @pytest.mark.asyncio
    async def test_fifo_order(self):
        queue = ContentQueue()
        for fragment in ["one", "two", "three"]:
            queue.enqueue(fragment)
        queue.close()

        drained = []
        while (fragment := await queue.dequeue()) is not None:
            drained.append(fragment)
        assert drained == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_dequeue_drains_before_reporting_closed(self):
        queue = ContentQueue()
        queue.enqueue("last")
        queue.close()

        assert await queue.dequeue() == "last"
        assert await queue.dequeue() is None
        assert await queue.dequeue() is None

    @pytest.mark.asyncio
    async def test_dequeue_waits_for_content(self):
        queue = ContentQueue()
        waiter = asyncio.create_task(queue.dequeue())
        await asyncio.sleep(0.01)
        assert not waiter.done()

        queue.enqueue("late")
        assert await asyncio.wait_for(waiter, timeout=1) == "late"

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_consumer(self):
        queue = ContentQueue()
        waiter = asyncio.create_task(queue.dequeue())
        await asyncio.sleep(0.01)

        queue.close()
        assert await asyncio.wait_for(waiter, timeout=1) is None

    def test_enqueue_after_close_raises(self):
        queue = ContentQueue()
        queue.close()
        with pytest.raises(RuntimeError):
            queue.enqueue("too late")

    def test_close_is_idempotent(self):
        queue = ContentQueue()
        queue.close()
        queue.close()
        assert queue.closed

    def test_is_empty_and_len(self):
        queue = ContentQueue()
        assert queue.is_empty()
        queue.enqueue("a")
        queue.enqueue("b")
        assert not queue.is_empty()
        assert len(queue) == 2
