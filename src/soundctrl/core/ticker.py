"""Fixed-interval asyncio loop that never overlaps its own ticks."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[object]]


class PeriodicLoop:
    """Run an async callback at a fixed interval.

    If a tick is still running when the next one is due, the new tick is
    skipped rather than queued, so a slow or unresponsive server never builds
    up a backlog. There is no backoff: the cadence stays fixed so recovery
    latency is bounded.

    Exceptions escaping the callback are logged and do not stop the loop.

    Example:
        loop = PeriodicLoop("catalog", 0.1, engine.check_catalog)
        loop.start()
        ...
        await loop.stop()
    """

    def __init__(self, name: str, interval: float, callback: TickCallback) -> None:
        """Initialize the loop.

        Args:
            name: Name used in log messages.
            interval: Seconds between scheduled ticks.
            callback: Coroutine function run on each tick.
        """
        self._name = name
        self._interval = interval
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._ticks = 0
        self._skipped = 0

    @property
    def name(self) -> str:
        """Return loop name."""
        return self._name

    @property
    def interval(self) -> float:
        """Return interval in seconds."""
        return self._interval

    @property
    def is_running(self) -> bool:
        """Return True if the loop is scheduling ticks."""
        return self._task is not None and not self._task.done()

    @property
    def tick_in_flight(self) -> bool:
        """Return True if a tick is currently executing."""
        return self._tick_task is not None and not self._tick_task.done()

    @property
    def tick_count(self) -> int:
        """Return number of ticks started."""
        return self._ticks

    @property
    def skipped_count(self) -> int:
        """Return number of ticks skipped because the previous one was busy."""
        return self._skipped

    def start(self) -> None:
        """Start scheduling ticks on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=f"{self._name}-loop")
        logger.debug("%s loop started (every %.3fs)", self._name, self._interval)

    async def stop(self) -> None:
        """Stop scheduling ticks and cancel the one in flight.

        Blocking HTTP calls already handed to an executor thread run to
        completion there; their results are dropped.
        """
        for task in (self._task, self._tick_task):
            if task is not None and not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self._task = None
        self._tick_task = None
        logger.debug("%s loop stopped", self._name)

    async def _run(self) -> None:
        """Schedule ticks until cancelled."""
        while True:
            await asyncio.sleep(self._interval)
            if self.tick_in_flight:
                self._skipped += 1
                logger.debug("%s tick skipped: previous tick still running", self._name)
                continue
            self._ticks += 1
            self._tick_task = asyncio.create_task(self._tick(), name=f"{self._name}-tick")

    async def _tick(self) -> None:
        """Run one tick, logging anything unexpected."""
        try:
            await self._callback()
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error in %s loop", self._name)
