"""Request usage metering interface.

Request counting is not implemented here. The gateway consults a
``UsageMeter`` for the current counters; ``NullUsageMeter`` reports zero
usage so only the policy side is exercised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UsageCounts:
    """Requests made by an owner in the current day and minute windows."""

    daily: int = 0
    minute: int = 0


class UsageMeter(ABC):
    """Source of per-owner request counters."""

    @abstractmethod
    async def get_counts(self, owner_id: str) -> UsageCounts:
        ...


class NullUsageMeter(UsageMeter):
    """Meter that always reports no usage."""

    async def get_counts(self, owner_id: str) -> UsageCounts:
        return UsageCounts()
