"""Concurrency utilities for Keygate."""

from keygate.concurrency.deadline import deadline
from keygate.concurrency.locks import get_lock_count, get_owner_lock

__all__ = ["deadline", "get_owner_lock", "get_lock_count"]
