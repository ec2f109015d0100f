"""Scheduler for the periodic forum garbage collection sweep.

Runs one background task that triggers a full sweep on a fixed interval.
The first sweep happens one interval after start, like a ticker. Later ticks
are measured from the start of the previous sweep, and a sweep that overruns
the interval simply delays the next one, so sweeps never overlap.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from threadherder.util.logger import get_logger

logger = get_logger("gc_scheduler")


class GarbageCollectionScheduler:
    """
    Periodic runner for the garbage collection sweep.

    Args:
        sweep: Coroutine function performing one full sweep.
        get_interval: Callable returning the interval in seconds (called at start).
    """

    def __init__(
        self,
        sweep: Callable[[], Awaitable[object]],
        get_interval: Callable[[], float],
    ) -> None:
        self._sweep = sweep
        self._get_interval = get_interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> None:
        """Run a single sweep, logging anything that aborts it."""
        try:
            await self._sweep()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[GC SCHEDULER] Unexpected error during sweep: %s", exc, exc_info=True)

    async def _run_loop(self, interval: float) -> None:
        """Infinite loop: wait out the interval, then sweep."""
        logger.info("[GC SCHEDULER] Starting garbage collection (interval=%.1fs)", interval)
        try:
            await asyncio.sleep(interval)
            while True:
                started = time.monotonic()
                await self.run_once()
                elapsed = time.monotonic() - started
                if elapsed > interval:
                    logger.warning("[GC SCHEDULER] Sweep took %.1fs, longer than the %.1fs interval", elapsed, interval)
                await asyncio.sleep(max(0.0, interval - elapsed))
        except asyncio.CancelledError:
            logger.info("[GC SCHEDULER] Garbage collection cancelled")
            raise

    def start(self) -> None:
        """Start the background task if not already running."""
        if self.running:
            logger.debug("[GC SCHEDULER] Garbage collection task already running")
            return
        interval = self._get_interval()
        self._task = asyncio.create_task(self._run_loop(interval))

    async def shutdown(self) -> None:
        """Stop the background task and wait for it to finish."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("[GC SCHEDULER] Scheduler shutdown complete")
