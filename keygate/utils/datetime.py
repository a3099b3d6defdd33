"""Datetime helpers.

Provides UTC timestamp helpers without using deprecated ``datetime.utcnow()``.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return current UTC time as a naive datetime.

    Models store UTC timestamps as naive datetimes; this helper keeps
    that storage/serialization behavior.
    """
    return datetime.now(UTC).replace(tzinfo=None)
