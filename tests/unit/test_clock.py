"""
Unit tests for the tick sources.

Part of HYG-18: Session phase state machine
"""
import asyncio

import pytest

from backend.core.clock import AsyncioTickSource, ManualTickSource

pytestmark = pytest.mark.unit


class Counter:
    def __init__(self):
        self.count = 0

    async def __call__(self):
        self.count += 1


class TestManualTickSource:
    """Tests for the caller-driven tick source."""

    @pytest.mark.asyncio
    async def test_advance_delivers_ticks(self):
        clock = ManualTickSource()
        counter = Counter()
        clock.start(counter)
        assert await clock.advance(3) == 3
        assert counter.count == 3
        assert clock.ticks_delivered == 3

    @pytest.mark.asyncio
    async def test_advance_without_callback(self):
        clock = ManualTickSource()
        assert await clock.advance(5) == 0
        assert not clock.is_running

    @pytest.mark.asyncio
    async def test_start_replaces_previous_callback(self):
        clock = ManualTickSource()
        first, second = Counter(), Counter()
        clock.start(first)
        clock.start(second)
        await clock.advance(2)
        assert first.count == 0
        assert second.count == 2
        assert clock.start_count == 2
        assert clock.stop_count == 1

    @pytest.mark.asyncio
    async def test_callback_can_stop_the_clock(self):
        clock = ManualTickSource()
        calls = []

        async def once():
            calls.append(1)
            clock.stop()

        clock.start(once)
        assert await clock.advance(5) == 1
        assert calls == [1]


class TestAsyncioTickSource:
    """Tests for the asyncio-backed tick source."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            AsyncioTickSource(0)

    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self):
        clock = AsyncioTickSource(0.01)
        counter = Counter()
        clock.start(counter)
        assert clock.is_running
        await asyncio.sleep(0.08)
        clock.stop()
        seen = counter.count
        assert seen > 0
        await asyncio.sleep(0.05)
        assert counter.count == seen
        assert not clock.is_running

    @pytest.mark.asyncio
    async def test_restart_cancels_previous_loop(self):
        clock = AsyncioTickSource(0.01)
        first, second = Counter(), Counter()
        clock.start(first)
        clock.start(second)
        await asyncio.sleep(0.08)
        clock.stop()
        assert first.count == 0
        assert second.count > 0

    @pytest.mark.asyncio
    async def test_callback_stopping_itself_completes(self):
        clock = AsyncioTickSource(0.01)
        finished = asyncio.Event()

        async def stop_then_work():
            clock.stop()
            await asyncio.sleep(0.01)
            finished.set()

        clock.start(stop_then_work)
        await asyncio.wait_for(finished.wait(), timeout=1)
        assert not clock.is_running

    @pytest.mark.asyncio
    async def test_callback_restarting_clock_keeps_single_loop(self):
        clock = AsyncioTickSource(0.01)
        counter = Counter()

        async def restart():
            clock.start(counter)

        clock.start(restart)
        await asyncio.sleep(0.06)
        clock.stop()
        seen = counter.count
        await asyncio.sleep(0.05)
        assert seen > 0
        assert counter.count == seen

    @pytest.mark.asyncio
    async def test_failing_callback_stops_clock(self):
        clock = AsyncioTickSource(0.01)

        async def boom():
            raise RuntimeError("boom")

        clock.start(boom)
        await asyncio.sleep(0.05)
        assert not clock.is_running
