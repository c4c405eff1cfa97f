"""
Rate-Limited Scheduler
======================
Single control loop that starts at most one batch per interval.

The loop is driven by an ``asyncio`` timer owned by the scheduler. Each tick
either waits out the rest of the interval, re-checks an empty queue after the
idle delay, or hands one batch to the executor and waits a full interval once
it returns. A batch that runs longer than the interval delays the next tick;
there is no catch-up.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from ingestion.executor import BatchExecutor
from ingestion.priority_queue import BatchQueue

logger = logging.getLogger(__name__)


class RateLimitedScheduler:
    """Dequeues and executes batches no faster than one per ``interval`` seconds."""

    def __init__(
        self,
        queue: BatchQueue,
        executor: BatchExecutor,
        interval: float = 5.0,
        idle_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._queue = queue
        self._executor = executor
        self.interval = interval
        self.idle_interval = idle_interval
        self._clock = clock

        self._running = False
        self._last_process_time: Optional[float] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._wakeup: Optional[asyncio.TimerHandle] = None
        self._tick_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_process_time(self) -> Optional[float]:
        return self._last_process_time

    @property
    def busy(self) -> bool:
        """True while a tick (and so possibly a batch) is in flight."""
        return self._tick_task is not None and not self._tick_task.done()

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin ticking on the running event loop. Calling twice is a no-op."""
        if self._running:
            return
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            # Handles from an earlier loop can never fire or finish here.
            self._wakeup = None
            self._tick_task = None
        self._loop = loop
        self._running = True
        logger.info("Scheduler started (interval=%ss, idle=%ss)", self.interval, self.idle_interval)
        # An in-flight tick reschedules itself when it sees the flag again.
        if not self.busy:
            self._schedule(0)

    def stop(self) -> None:
        """Cancel the pending wakeup. A batch already executing runs to the end."""
        if not self._running:
            return
        self._running = False
        self._cancel_wakeup()
        logger.info("Scheduler stopped")

    async def wait_idle(self) -> None:
        """Wait for an in-flight tick to finish, e.g. during shutdown."""
        if self._tick_task is not None and not self._tick_task.done():
            await asyncio.shield(self._tick_task)

    # ------------------------------------------------------------------
    # ticking
    # ------------------------------------------------------------------
    def _schedule(self, delay: float) -> None:
        self._cancel_wakeup()
        self._wakeup = self._loop.call_later(delay, self._spawn_tick)

    def _cancel_wakeup(self) -> None:
        if self._wakeup is not None:
            self._wakeup.cancel()
            self._wakeup = None

    def _spawn_tick(self) -> None:
        self._wakeup = None
        self._tick_task = self._loop.create_task(self.tick())

    async def tick(self) -> Optional[float]:
        """Run one scheduling step and arm the next wakeup while running."""
        if not self._running:
            return None
        try:
            delay = await self.run_once()
        except Exception:
            logger.exception("Scheduler tick failed; retrying after %ss", self.interval)
            delay = self.interval
        if self._running:
            self._schedule(delay)
        return delay

    async def run_once(self) -> float:
        """Make one dequeue decision and return the delay until the next one."""
        if self._last_process_time is not None:
            elapsed = self._clock() - self._last_process_time
            if elapsed < self.interval:
                wait = self.interval - elapsed
                logger.debug("Rate limit: waiting %.3fs before next batch", wait)
                return wait

        batch = self._queue.dequeue_next()
        if batch is None:
            return self.idle_interval

        await self._executor.execute(batch)
        self._last_process_time = self._clock()
        return self.interval
