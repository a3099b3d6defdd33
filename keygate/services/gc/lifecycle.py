"""GC lifecycle management for FastAPI lifespan integration."""

from __future__ import annotations

import structlog

from keygate.config import get_settings
from keygate.services.cooldown import Cooldown
from keygate.services.gc.scheduler import GCScheduler
from keygate.services.gc.tasks import CooldownSweepGC

logger = structlog.get_logger()

# Global scheduler instance
_gc_scheduler: GCScheduler | None = None


async def init_gc_scheduler(cooldown: Cooldown) -> GCScheduler | None:
    """Create and start the scheduler if GC is enabled."""
    global _gc_scheduler

    settings = get_settings()
    if not settings.gc.enabled:
        logger.info("gc.disabled")
        return None

    _gc_scheduler = GCScheduler(tasks=[CooldownSweepGC(cooldown)], config=settings.gc)
    await _gc_scheduler.start()
    return _gc_scheduler


async def shutdown_gc_scheduler() -> None:
    """Stop the scheduler if running."""
    global _gc_scheduler

    if _gc_scheduler is not None:
        await _gc_scheduler.stop()
        _gc_scheduler = None


def get_gc_scheduler() -> GCScheduler | None:
    return _gc_scheduler
