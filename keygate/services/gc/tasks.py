"""GC task implementations."""

from __future__ import annotations

from keygate.services.cooldown import Cooldown
from keygate.services.gc.base import GCResult, GCTask


class CooldownSweepGC(GCTask):
    """Evicts cooldown entries older than interval + margin."""

    def __init__(self, cooldown: Cooldown) -> None:
        self._cooldown = cooldown

    @property
    def name(self) -> str:
        return "cooldown_sweep"

    async def run(self) -> GCResult:
        return GCResult(task_name=self.name, cleaned_count=self._cooldown.sweep())
