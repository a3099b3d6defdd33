"""API Key service.

Handles the key lifecycle for an owner (list, create, revoke, delete) under
plan quotas, and resolution of a presented key to an identity.
"""

from __future__ import annotations

import uuid

import structlog

from keygate.concurrency import deadline
from keygate.models.account import Account
from keygate.models.api_key import ApiKey
from keygate.repositories.base import ApiKeyRepository
from keygate.services import key_codec, plans
from keygate.services.results import (
    ApiKeyCreateResult,
    ApiKeyView,
    FailureKind,
    Identity,
    ServiceResult,
)
from keygate.utils.datetime import utcnow

logger = structlog.get_logger()

_NOT_FOUND = "API key not found."


def to_view(api_key: ApiKey) -> ApiKeyView:
    """Convert a stored key to its display form (hash-derived preview)."""
    return ApiKeyView(
        id=api_key.id,
        name=api_key.name,
        key_preview=key_codec.preview_for_hash(api_key.key_hash),
        is_active=api_key.is_active,
        created_at=api_key.created_at,
        last_used_at=api_key.last_used_at,
    )


def _max_keys(account: Account) -> int:
    return plans.get_plan(account.plan).max_api_keys


class ApiKeyService:
    """Service for API key lifecycle management."""

    def __init__(self, repository: ApiKeyRepository) -> None:
        self._repo = repository
        self._log = logger.bind(service="api_key")

    async def list_keys(self, owner_id: str, *, timeout: float | None = None) -> list[ApiKeyView]:
        """List an owner's keys, newest first, including revoked ones."""
        async with deadline("api_key.list", timeout):
            keys = await self._repo.list_keys(owner_id)
        return [to_view(k) for k in keys]

    async def create_key(
        self,
        owner_id: str,
        name: str,
        *,
        timeout: float | None = None,
    ) -> ApiKeyCreateResult:
        """Create a key if the owner's plan allows another active one.

        The plaintext is returned in the result exactly once; only its
        hash is stored.
        """
        plain_key = key_codec.generate_key()
        api_key = ApiKey(
            id=f"key-{uuid.uuid4().hex[:12]}",
            owner_id=owner_id,
            name=name.strip(),
            key_hash=key_codec.hash_key(plain_key),
            is_active=True,
            created_at=utcnow(),
        )

        async with deadline("api_key.create", timeout):
            inserted, limit = await self._repo.add_if_below_limit(api_key, _max_keys)

        if not inserted:
            if limit < 0:
                return ApiKeyCreateResult.fail("User not found.", FailureKind.NOT_FOUND)
            return ApiKeyCreateResult.fail(
                f"You have reached the maximum number of API keys ({limit}) for your plan.",
                FailureKind.LIMIT_EXCEEDED,
            )

        view = to_view(api_key)
        self._log.info(
            "api_key.create",
            owner_id=owner_id,
            key_id=api_key.id,
            key_preview=view.key_preview,
        )
        return ApiKeyCreateResult.created(plain_key, view)

    async def revoke_key(
        self,
        owner_id: str,
        key_id: str,
        *,
        timeout: float | None = None,
    ) -> ServiceResult:
        """Deactivate a key. Revoking an already revoked key succeeds."""
        async with deadline("api_key.revoke", timeout):
            found = await self._repo.deactivate(owner_id, key_id)

        if not found:
            return ServiceResult.fail(_NOT_FOUND, FailureKind.NOT_FOUND)

        self._log.info("api_key.revoke", owner_id=owner_id, key_id=key_id)
        return ServiceResult.ok("API key revoked successfully.")

    async def delete_key(
        self,
        owner_id: str,
        key_id: str,
        *,
        timeout: float | None = None,
    ) -> ServiceResult:
        """Permanently remove a key."""
        async with deadline("api_key.delete", timeout):
            found = await self._repo.delete(owner_id, key_id)

        if not found:
            return ServiceResult.fail(_NOT_FOUND, FailureKind.NOT_FOUND)

        self._log.info("api_key.delete", owner_id=owner_id, key_id=key_id)
        return ServiceResult.ok("API key deleted successfully.")

    async def count_active(self, owner_id: str, *, timeout: float | None = None) -> int:
        async with deadline("api_key.count", timeout):
            return await self._repo.count_active(owner_id)

    async def resolve(self, plaintext: str, *, timeout: float | None = None) -> Identity | None:
        """Resolve a presented key to the identity of its owner.

        Only active keys match. Malformed keys are rejected without a lookup.
        """
        if not key_codec.is_well_formed(plaintext):
            return None

        async with deadline("api_key.resolve", timeout):
            found = await self._repo.find_active_by_hash(key_codec.hash_key(plaintext))

        if found is None:
            return None

        api_key, account = found
        return Identity(
            owner_id=account.id,
            plan=plans.get_plan(account.plan).plan,
            auth_method="api_key",
            api_key_id=api_key.id,
        )

