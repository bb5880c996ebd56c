"""Fixed-interval driver for the fallback coordinator."""

from __future__ import annotations

import asyncio
import logging

from .fallback import CycleResult, FallbackCoordinator

logger = logging.getLogger(__name__)


class PollScheduler:
    """Runs one fetch cycle per interval, never more than one at a time.

    A tick that arrives while the previous cycle is still in flight is
    skipped, not queued. start() fires the first cycle immediately so early
    subscribers see data without waiting a full interval.

    Lifecycle:
        scheduler = PollScheduler(coordinator, interval=10.0)
        await scheduler.start()
        # ... app runs ...
        await scheduler.stop()
    """

    def __init__(self, coordinator: FallbackCoordinator, interval: float = 10.0) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._coordinator = coordinator
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._cycle: asyncio.Task | None = None
        self.skipped_ticks: int = 0
        self.completed_cycles: int = 0
        self.last_result: CycleResult | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def in_flight(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    async def start(self) -> None:
        """Fire the first cycle now and start ticking. Must be called once."""
        self.tick()
        self._task = asyncio.create_task(self._tick_loop(), name="poll-scheduler")
        logger.info("Poll scheduler started: %.1fs interval", self._interval)

    async def stop(self) -> None:
        """Stop ticking and cancel any in-flight cycle. Safe to call multiple times."""
        for task in (self._task, self._cycle):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._cycle = None
        logger.info("Poll scheduler stopped")

    def tick(self) -> bool:
        """Start a cycle unless one is already running. Returns True if started."""
        if self.in_flight:
            self.skipped_ticks += 1
            logger.warning("Previous fetch cycle still running; skipping tick")
            return False
        self._cycle = asyncio.create_task(self._run_cycle(), name="poll-cycle")
        return True

    async def wait_idle(self) -> None:
        """Wait for the in-flight cycle, if any, to finish."""
        if self._cycle is not None and not self._cycle.done():
            await asyncio.shield(self._cycle)

    # --- Internal ---

    async def _tick_loop(self) -> None:
        """Tick on interval. The first cycle was already fired by start()."""
        while True:
            await asyncio.sleep(self._interval)
            self.tick()

    async def _run_cycle(self) -> None:
        try:
            result = await self._coordinator.run_cycle()
        except Exception:
            # Don't re-raise; the next tick will try again.
            logger.exception("Fetch cycle failed")
            return
        self.last_result = result
        self.completed_cycles += 1
        logger.debug(
            "Fetch cycle %d: %d tickers from %s",
            self.completed_cycles,
            len(result.tickers),
            result.source,
        )
