"""Background maintenance tasks."""

from keygate.services.gc.base import GCResult, GCTask
from keygate.services.gc.scheduler import GCScheduler
from keygate.services.gc.tasks import CooldownSweepGC

__all__ = ["GCResult", "GCTask", "GCScheduler", "CooldownSweepGC"]
