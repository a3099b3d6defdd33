"""Global HTTP client manager for Keygate.

Provides a shared httpx.AsyncClient for outbound calls (the HTTP email
transport). Started and stopped by the FastAPI lifespan.
"""

from __future__ import annotations

import httpx
import structlog

logger = structlog.get_logger()


class HTTPClientManager:
    """Manages a shared httpx.AsyncClient with connection pooling.

    Usage:
        await http_client_manager.startup()
        response = await http_client_manager.client.post("https://...")
        await http_client_manager.shutdown()
    """

    def __init__(
        self,
        *,
        max_connections: int = 50,
        max_keepalive_connections: int = 10,
        timeout: float = 10.0,
    ) -> None:
        self._max_connections = max_connections
        self._max_keepalive_connections = max_keepalive_connections
        self._timeout = timeout

        self._client: httpx.AsyncClient | None = None
        self._log = logger.bind(component="http_client")

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the shared HTTP client.

        Raises:
            RuntimeError: If client is not initialized (call startup first)
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialized. Call startup() first.")
        return self._client

    @property
    def is_started(self) -> bool:
        return self._client is not None

    async def startup(self) -> None:
        """Initialize the HTTP client."""
        if self._client is not None:
            self._log.warning("http_client.already_started")
            return

        self._client = httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=self._max_connections,
                max_keepalive_connections=self._max_keepalive_connections,
            ),
            timeout=httpx.Timeout(self._timeout),
        )
        self._log.info("http_client.started", max_connections=self._max_connections)

    async def shutdown(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is None:
            return

        await self._client.aclose()
        self._client = None
        self._log.info("http_client.shutdown")


# Global singleton instance
http_client_manager = HTTPClientManager()
