"""
Tick sources for the session clock.

Part of HYG-18: Session phase state machine

The controller never sleeps itself: it hands its `tick` coroutine to a
TickSource. `start()` always stops the previous loop before starting the next
one, so a phase change can never leave two loops ticking the same session.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]

DEFAULT_TICK_INTERVAL_SECONDS = 1.0


class TickSource(Protocol):
    """Something that calls a coroutine once per clock step."""

    def start(self, callback: TickCallback) -> None:
        """Stop any running loop, then start calling `callback`."""
        ...

    def stop(self) -> None:
        """Stop calling the current callback."""
        ...

    @property
    def is_running(self) -> bool:
        ...


class ManualTickSource:
    """
    Tick source driven by the caller, for tests and replays.

    Usage:
        clock = ManualTickSource()
        controller = SessionController(store, provider, tick_source=clock)
        await controller.start()
        await clock.advance(30)   # 30 one-second ticks
    """

    def __init__(self):
        self._callback: Optional[TickCallback] = None
        self.start_count = 0
        self.stop_count = 0
        self.ticks_delivered = 0

    @property
    def is_running(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self.stop()
        self._callback = callback
        self.start_count += 1

    def stop(self) -> None:
        if self._callback is not None:
            self.stop_count += 1
        self._callback = None

    async def advance(self, ticks: int = 1) -> int:
        """
        Deliver up to `ticks` ticks to whatever callback is current.

        The callback may restart or stop the source between ticks; each tick
        goes to the callback registered at that moment.

        Returns:
            Number of ticks actually delivered
        """
        delivered = 0
        for _ in range(ticks):
            callback = self._callback
            if callback is None:
                break
            await callback()
            delivered += 1
        self.ticks_delivered += delivered
        return delivered


class AsyncioTickSource:
    """Tick source backed by an asyncio task sleeping `interval` seconds per step."""

    def __init__(self, interval: float = DEFAULT_TICK_INTERVAL_SECONDS):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback) -> None:
        self.stop()
        generation = self._generation
        self._task = asyncio.get_running_loop().create_task(self._run(callback, generation))

    def stop(self) -> None:
        task, self._task = self._task, None
        self._generation += 1
        # A callback stopping its own loop must not cancel itself mid-await;
        # the generation bump makes that loop exit once the callback returns.
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _run(self, callback: TickCallback, generation: int) -> None:
        while generation == self._generation:
            await asyncio.sleep(self._interval)
            if generation != self._generation:
                break
            try:
                await callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Tick callback failed; stopping clock")
                if generation == self._generation:
                    self._task = None
                    self._generation += 1
                return
