"""GC Scheduler - runs maintenance tasks periodically."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from keygate.services.gc.base import GCResult, GCTask

if TYPE_CHECKING:
    from keygate.config import GCConfig

logger = structlog.get_logger()


class GCScheduler:
    """Scheduler for GC tasks.

    Runs tasks serially in registration order. A failing task is logged
    and recorded in its GCResult; it never stops the loop.

    Usage:
        scheduler = GCScheduler(tasks=[CooldownSweepGC(cooldown)], config=settings.gc)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(self, tasks: list[GCTask], config: "GCConfig") -> None:
        self._tasks = tasks
        self._config = config
        self._log = logger.bind(service="gc_scheduler")

        self._running = False
        self._task: asyncio.Task | None = None

        # Prevents run_once and the background loop from overlapping
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_once(self) -> list[GCResult]:
        """Execute one GC cycle, waiting for any cycle in progress."""
        async with self._run_lock:
            results = [await self._run_task(task) for task in self._tasks]

        self._log.debug(
            "gc.cycle.complete",
            total_cleaned=sum(r.cleaned_count for r in results),
            total_errors=sum(len(r.errors) for r in results),
        )
        return results

    async def _run_task(self, task: GCTask) -> GCResult:
        try:
            result = await task.run()
            result.task_name = task.name
            return result
        except Exception as e:
            self._log.exception("gc.task.failed", task=task.name, error=str(e))
            result = GCResult(task_name=task.name)
            result.add_error(f"Task failed: {e}")
            return result

    async def start(self) -> None:
        """Start the background loop."""
        if self._running:
            self._log.warning("gc.scheduler.already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._background_loop())
        self._log.info("gc.scheduler.started", interval_seconds=self._config.interval_seconds)

    async def stop(self) -> None:
        """Stop the background loop and wait for it to exit."""
        if not self._running:
            return

        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._log.info("gc.scheduler.stopped")

    async def _background_loop(self) -> None:
        if self._config.run_on_startup:
            await self.run_once()

        while self._running:
            try:
                await asyncio.sleep(self._config.interval_seconds)
            except asyncio.CancelledError:
                break

            try:
                await self.run_once()
            except Exception as e:
                self._log.exception("gc.scheduler.cycle_error", error=str(e))
