"""
Fixed-Interval Scheduler

Provides ScheduledLoop class that fires an async callback at exact intervals,
accounting for callback execution time to prevent drift.

Unlike asyncio.sleep()-based loops, this scheduler:
- Runs on the event loop's monotonic clock, so wall-clock steps do not stall it
- Tracks cumulative drift
- Skips missed intervals to catch up
- Stops deterministically via an awaitable stop()

Usage:
    async def refresh():
        ...

    loop = ScheduledLoop(5.0, refresh, name="config-refresh")
    loop.start()

    # Later:
    await loop.stop()
"""

import asyncio
from typing import Awaitable, Callable

from .logging_setup import get_service_logger

logger = get_service_logger("scheduler")


class ScheduledLoop:
    """
    Interval scheduler that accounts for execution time.

    If the callback takes time, the next iteration is scheduled relative to
    the original schedule, not relative to when the callback finished.

    Attributes:
        interval: The interval in seconds between executions
        callback: Async function to call each interval
        name: Name for logging/identification
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], Awaitable[object]],
        name: str = "unnamed",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval = interval_seconds
        self.callback = callback
        self.name = name

        self._next_run: float = 0
        self._running = False
        self._task: asyncio.Task | None = None

        # Observability metrics
        self._drift_total: float = 0
        self._skipped_count: int = 0
        self._execution_count: int = 0
        self._last_execution_time: float = 0
        self._last_drift_ms: float = 0

    @property
    def is_running(self) -> bool:
        return self._running and self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop in a background task. Must be called from a running event loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run(), name=f"scheduled-loop:{self.name}")

    async def stop(self) -> None:
        """Stop the loop and wait for the background task to finish."""
        self._running = False
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        """Main loop that fires callback at fixed intervals."""
        clock = asyncio.get_running_loop().time
        self._next_run = clock() + self.interval

        while self._running:
            sleep_duration = self._next_run - clock()
            if sleep_duration > 0:
                await asyncio.sleep(sleep_duration)

            if not self._running:
                break

            drift = clock() - self._next_run
            self._drift_total += max(0, drift)
            self._last_drift_ms = drift * 1000

            try:
                start = clock()
                await self.callback()
                self._last_execution_time = clock() - start
                self._execution_count += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Scheduled callback '{self.name}' error: {e}", exc_info=True)

            # Skip missed intervals rather than queueing them
            now = clock()
            skipped = 0
            while self._next_run <= now:
                self._next_run += self.interval
                skipped += 1

            if skipped > 1:
                self._skipped_count += skipped - 1
                logger.warning(
                    f"Scheduler '{self.name}' skipped {skipped - 1} intervals "
                    f"(execution took {self._last_execution_time:.3f}s)"
                )

    @property
    def drift_seconds(self) -> float:
        """Total accumulated drift in seconds."""
        return self._drift_total

    @property
    def skipped_count(self) -> int:
        """Number of intervals skipped to catch up."""
        return self._skipped_count

    @property
    def execution_count(self) -> int:
        """Total number of completed executions."""
        return self._execution_count

    def get_stats(self) -> dict:
        """Get scheduler statistics for observability."""
        return {
            "name": self.name,
            "interval_s": self.interval,
            "execution_count": self._execution_count,
            "drift_total_s": round(self._drift_total, 3),
            "drift_last_ms": round(self._last_drift_ms, 1),
            "skipped_count": self._skipped_count,
            "last_execution_s": round(self._last_execution_time, 3),
        }
