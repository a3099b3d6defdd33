"""Per-subject cooldown for security-sensitive actions.

Enforces a minimum interval between repeats of an action (e.g. resending a
verification email) for each subject. State is process-local.

The map is split into lock stripes: a subject always hashes to the same
stripe, so check-and-record for one subject is linearizable while
unrelated subjects rarely contend. The critical sections never await,
so the same instance is safe from threads and from asyncio tasks.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class CooldownResult:
    """Outcome of ``Cooldown.try_consume``.

    Attributes:
        allowed: Whether the action may proceed (and was recorded)
        remaining: Wait time until the next permitted action, when not allowed
    """

    allowed: bool
    remaining: timedelta | None = None

    @property
    def remaining_minutes(self) -> int:
        """Remaining wait rounded up to whole minutes (0 when allowed)."""
        if self.remaining is None:
            return 0
        seconds = self.remaining.total_seconds()
        return max(1, -(-int(seconds * 1000) // 60_000))


class Cooldown:
    """Keyed "last permitted action" map."""

    def __init__(
        self,
        interval: timedelta = timedelta(minutes=2),
        *,
        sweep_margin: timedelta = timedelta(hours=1),
        stripes: int = 64,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cooldown map.

        Args:
            interval: Default minimum interval between permitted actions
            sweep_margin: Extra age beyond ``interval`` before an entry is evicted
            stripes: Number of lock stripes
            clock: Monotonic clock in seconds (injectable for tests)
        """
        if stripes < 1:
            raise ValueError("stripes must be >= 1")
        self._interval = interval
        self._sweep_margin = sweep_margin
        self._clock = clock
        self._locks = [threading.Lock() for _ in range(stripes)]
        self._buckets: list[dict[str, float]] = [{} for _ in range(stripes)]
        self._log = logger.bind(component="cooldown")

    @property
    def interval(self) -> timedelta:
        return self._interval

    def _stripe(self, subject: str) -> int:
        return hash(subject) % len(self._locks)

    def try_consume(self, subject: str, interval: timedelta | None = None) -> CooldownResult:
        """Record an action for ``subject`` if its cooldown has elapsed.

        Among concurrent callers for one subject exactly one wins a given
        window; the others see the winner's timestamp.
        """
        window = (interval if interval is not None else self._interval).total_seconds()
        idx = self._stripe(subject)

        with self._locks[idx]:
            bucket = self._buckets[idx]
            now = self._clock()
            last = bucket.get(subject)
            if last is not None:
                elapsed = now - last
                if elapsed < window:
                    remaining = max(0.0, window - elapsed)
                    return CooldownResult(allowed=False, remaining=timedelta(seconds=remaining))
            bucket[subject] = now

        return CooldownResult(allowed=True)

    def release(self, subject: str) -> None:
        """Forget the last action for ``subject``.

        Used when the guarded action failed after ``try_consume`` succeeded.
        """
        idx = self._stripe(subject)
        with self._locks[idx]:
            self._buckets[idx].pop(subject, None)

    def sweep(self, max_age: timedelta | None = None) -> int:
        """Evict entries older than ``max_age``.

        Defaults to ``interval + sweep_margin``. Each stripe is swept under
        its own lock, so an in-flight ``try_consume`` write is never lost.

        Returns:
            Number of evicted entries
        """
        age = (max_age if max_age is not None else self._interval + self._sweep_margin).total_seconds()
        evicted = 0

        for lock, bucket in zip(self._locks, self._buckets):
            with lock:
                cutoff = self._clock() - age
                stale = [subject for subject, ts in bucket.items() if ts < cutoff]
                for subject in stale:
                    del bucket[subject]
                evicted += len(stale)

        if evicted:
            self._log.debug("cooldown.sweep", evicted=evicted)
        return evicted

    def __len__(self) -> int:
        total = 0
        for lock, bucket in zip(self._locks, self._buckets):
            with lock:
                total += len(bucket)
        return total
