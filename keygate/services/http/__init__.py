"""Outbound HTTP client."""

from keygate.services.http.client import HTTPClientManager, http_client_manager

__all__ = ["HTTPClientManager", "http_client_manager"]
