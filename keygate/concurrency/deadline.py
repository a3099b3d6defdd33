"""Caller-supplied deadlines for I/O-bound operations."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from keygate.errors import RequestTimeoutError

logger = structlog.get_logger()


@asynccontextmanager
async def deadline(operation: str, timeout: float | None) -> AsyncIterator[None]:
    """Bound the enclosed block by ``timeout`` seconds (None = no bound).

    On expiry the block is cancelled and RequestTimeoutError is raised.
    Database sessions roll back on cancellation, so nothing is committed.
    """
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as e:
        logger.warning("deadline.exceeded", operation=operation, timeout=timeout)
        raise RequestTimeoutError(
            f"Operation timed out: {operation}",
            details={"operation": operation, "timeout": timeout},
        ) from e
