"""Owner-level in-memory locks for the API key quota.

Used by SqlApiKeyRepository to serialize the count-check-and-insert
sequence of concurrent creates for the same owner. Creates for different
owners never contend.

Note: These locks only work within a single process. For multi-instance
deployments the repository also takes a row lock (SELECT ... FOR UPDATE)
on the owning account.
"""

from __future__ import annotations

import asyncio
import weakref

# Key: owner_id, Value: asyncio.Lock
# Weak values: a lock lives exactly as long as some coroutine holds a reference.
_owner_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def get_owner_lock(owner_id: str) -> asyncio.Lock:
    """Get or create the lock for a specific owner.

    No await happens between lookup and insert, so two coroutines on the
    same event loop always receive the same lock object.
    """
    lock = _owner_locks.get(owner_id)
    if lock is None:
        lock = asyncio.Lock()
        _owner_locks[owner_id] = lock
    return lock


def get_lock_count() -> int:
    """Get current number of live locks (for testing/metrics)."""
    return len(_owner_locks)
