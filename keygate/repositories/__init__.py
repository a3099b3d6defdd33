"""Storage layer for accounts and API keys."""

from keygate.repositories.base import ApiKeyRepository, LimitResolver
from keygate.repositories.sql import SqlApiKeyRepository

__all__ = ["ApiKeyRepository", "LimitResolver", "SqlApiKeyRepository"]
