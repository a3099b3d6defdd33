"""GC task base classes and result structures."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class GCResult:
    """Result of a GC task execution.

    Attributes:
        task_name: Name of the GC task
        cleaned_count: Number of entries removed
        errors: Error messages collected during the run
    """

    task_name: str = ""
    cleaned_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, error: str) -> None:
        self.errors.append(error)


class GCTask(ABC):
    """A periodic maintenance job run by GCScheduler."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the task name (for logging)."""
        ...

    @abstractmethod
    async def run(self) -> GCResult:
        """Execute the task once and summarize what was cleaned."""
        ...
