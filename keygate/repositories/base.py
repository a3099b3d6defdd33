"""Repository interface for accounts and their API keys.

The production implementation is ``SqlApiKeyRepository``. Tests use an
in-memory implementation (``tests.fakes.InMemoryApiKeyRepository``) that
honors the same contract, in particular the atomicity of
``add_if_below_limit``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from keygate.models.account import Account
    from keygate.models.api_key import ApiKey

# Maps an owning account to its max number of active keys
LimitResolver = Callable[["Account"], int]


class ApiKeyRepository(ABC):
    """Storage contract consumed by ApiKeyService and AccountService."""

    @abstractmethod
    async def get_account(self, account_id: str) -> "Account | None":
        """Load an account by id."""
        ...

    @abstractmethod
    async def save_account(self, account: "Account") -> None:
        """Persist changes to an account (email confirmation fields)."""
        ...

    @abstractmethod
    async def list_keys(self, owner_id: str) -> list["ApiKey"]:
        """All keys of an owner, newest first, including inactive ones."""
        ...

    @abstractmethod
    async def count_active(self, owner_id: str) -> int:
        """Number of active keys of an owner."""
        ...

    @abstractmethod
    async def add_if_below_limit(
        self,
        api_key: "ApiKey",
        limit_for: LimitResolver,
    ) -> tuple[bool, int]:
        """Insert ``api_key`` iff its owner stays within quota.

        Atomic with respect to other calls for the same owner: the owner
        is loaded, ``limit_for(account)`` evaluated, active keys counted and
        the row inserted as one serialized step.

        Args:
            api_key: Fully built key row (hash already set)
            limit_for: Maps the owning account to its max active keys

        Returns:
            (inserted, limit). ``limit`` is -1 when the owner does not exist.
        """
        ...

    @abstractmethod
    async def get_key(self, owner_id: str, key_id: str) -> "ApiKey | None":
        """Load a key only if it belongs to ``owner_id``."""
        ...

    @abstractmethod
    async def deactivate(self, owner_id: str, key_id: str) -> bool:
        """Set ``is_active=False``. Returns False if not found for this owner."""
        ...

    @abstractmethod
    async def delete(self, owner_id: str, key_id: str) -> bool:
        """Remove a key row. Returns False if not found for this owner."""
        ...

    @abstractmethod
    async def find_active_by_hash(self, key_hash: str) -> "tuple[ApiKey, Account] | None":
        """Find an active key by hash together with its owner."""
        ...

