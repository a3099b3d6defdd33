"""Unit tests for ApiKeyService.

Runs against the in-memory repository; quota enforcement under
concurrency is exercised with asyncio.gather.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from keygate.errors import RequestTimeoutError
from keygate.models.plan import PlanType
from keygate.services.api_key import ApiKeyService
from keygate.services.key_codec import hash_key, preview_for_hash
from keygate.services.results import FailureKind
from tests.fakes import InMemoryApiKeyRepository, make_key


@pytest.fixture
def repo() -> InMemoryApiKeyRepository:
    repository = InMemoryApiKeyRepository()
    repository.add_account("user-free", PlanType.FREE)
    repository.add_account("user-premium", PlanType.PREMIUM)
    return repository


@pytest.fixture
def service(repo: InMemoryApiKeyRepository) -> ApiKeyService:
    return ApiKeyService(repo)


class TestCreateKey:
    async def test_returns_plaintext_once_and_stores_hash(
        self, service: ApiKeyService, repo: InMemoryApiKeyRepository
    ):
        result = await service.create_key("user-free", "My Key")

        assert result.success is True
        assert result.message == "API key created successfully."
        assert result.plain_key is not None
        assert result.plain_key.startswith("wc_")

        stored = repo.keys[result.api_key.id]
        assert stored.key_hash == hash_key(result.plain_key)
        assert result.plain_key not in stored.model_dump().values()

    async def test_view_never_contains_plaintext(self, service: ApiKeyService):
        result = await service.create_key("user-free", "My Key")
        view = result.api_key

        assert view.name == "My Key"
        assert view.is_active is True
        assert result.plain_key[3:-4] not in view.key_preview
        assert view.key_preview.startswith("wc_")

    async def test_preview_stable_between_create_and_list(self, service: ApiKeyService):
        created = await service.create_key("user-free", "My Key")
        [listed] = await service.list_keys("user-free")
        assert listed.key_preview == created.api_key.key_preview

    async def test_name_is_trimmed(self, service: ApiKeyService):
        result = await service.create_key("user-free", "  padded  ")
        assert result.api_key.name == "padded"

    async def test_free_plan_limit(self, service: ApiKeyService):
        first = await service.create_key("user-free", "A")
        second = await service.create_key("user-free", "B")

        assert first.success is True
        assert second.success is False
        assert second.failure == FailureKind.LIMIT_EXCEEDED
        assert second.message == "You have reached the maximum number of API keys (1) for your plan."
        assert second.plain_key is None

    async def test_premium_limit_names_number(self, service: ApiKeyService):
        for i in range(3):
            assert (await service.create_key("user-premium", f"k{i}")).success

        result = await service.create_key("user-premium", "k3")
        assert result.success is False
        assert "(3)" in result.message

    async def test_revoked_keys_free_a_slot(self, service: ApiKeyService):
        first = await service.create_key("user-free", "A")
        await service.revoke_key("user-free", first.api_key.id)

        second = await service.create_key("user-free", "B")
        assert second.success is True
        assert len(await service.list_keys("user-free")) == 2

    async def test_unknown_owner(self, service: ApiKeyService):
        result = await service.create_key("ghost", "A")
        assert result.success is False
        assert result.failure == FailureKind.NOT_FOUND
        assert result.message == "User not found."

    async def test_concurrent_creates_respect_limit(self):
        repo = InMemoryApiKeyRepository(insert_delay=0.01)
        repo.add_account("user-premium", PlanType.PREMIUM)
        service = ApiKeyService(repo)

        results = await asyncio.gather(
            *(service.create_key("user-premium", f"k{i}") for i in range(10))
        )

        assert sum(1 for r in results if r.success) == 3
        assert await repo.count_active("user-premium") == 3

    async def test_timeout_stores_nothing(self):
        repo = InMemoryApiKeyRepository(insert_delay=1.0)
        repo.add_account("user-free", PlanType.FREE)
        service = ApiKeyService(repo)

        with pytest.raises(RequestTimeoutError) as exc_info:
            await service.create_key("user-free", "slow", timeout=0.01)

        assert exc_info.value.details["operation"] == "api_key.create"
        assert repo.keys == {}


class TestListKeys:
    async def test_newest_first_including_revoked(
        self, service: ApiKeyService, repo: InMemoryApiKeyRepository
    ):
        repo.keys["key-old"] = make_key(
            "user-premium", "key-old", "a" * 64, created_at=datetime(2024, 1, 1)
        )
        repo.keys["key-new"] = make_key(
            "user-premium", "key-new", "b" * 64, created_at=datetime(2024, 6, 1)
        )
        await service.revoke_key("user-premium", "key-old")

        keys = await service.list_keys("user-premium")

        assert [k.id for k in keys] == ["key-new", "key-old"]
        assert keys[1].is_active is False
        assert keys[0].key_preview == preview_for_hash("b" * 64)

    async def test_only_own_keys(self, service: ApiKeyService):
        await service.create_key("user-free", "A")
        assert await service.list_keys("user-premium") == []


class TestRevokeAndDelete:
    async def test_revoke(self, service: ApiKeyService):
        created = await service.create_key("user-free", "A")

        result = await service.revoke_key("user-free", created.api_key.id)

        assert result.success is True
        assert result.message == "API key revoked successfully."
        [listed] = await service.list_keys("user-free")
        assert listed.is_active is False
        assert await service.resolve(created.plain_key) is None

    async def test_revoke_twice_succeeds(self, service: ApiKeyService):
        created = await service.create_key("user-free", "A")
        await service.revoke_key("user-free", created.api_key.id)
        assert (await service.revoke_key("user-free", created.api_key.id)).success is True

    async def test_revoke_other_owners_key(self, service: ApiKeyService):
        created = await service.create_key("user-free", "A")

        result = await service.revoke_key("user-premium", created.api_key.id)

        assert result.success is False
        assert result.failure == FailureKind.NOT_FOUND
        assert result.message == "API key not found."
        assert await service.resolve(created.plain_key) is not None

    async def test_delete(self, service: ApiKeyService, repo: InMemoryApiKeyRepository):
        created = await service.create_key("user-free", "A")

        result = await service.delete_key("user-free", created.api_key.id)

        assert result.success is True
        assert result.message == "API key deleted successfully."
        assert repo.keys == {}
        assert await service.resolve(created.plain_key) is None

    async def test_delete_missing(self, service: ApiKeyService):
        result = await service.delete_key("user-free", "key-missing")
        assert result.failure == FailureKind.NOT_FOUND


class TestResolve:
    async def test_active_key(self, service: ApiKeyService):
        created = await service.create_key("user-premium", "A")

        identity = await service.resolve(created.plain_key)

        assert identity is not None
        assert identity.owner_id == "user-premium"
        assert identity.plan == PlanType.PREMIUM
        assert identity.auth_method == "api_key"
        assert identity.api_key_id == created.api_key.id

    async def test_unknown_key(self, service: ApiKeyService):
        assert await service.resolve("wc_" + "x" * 32) is None

    async def test_malformed_key_skips_lookup(
        self, service: ApiKeyService, repo: InMemoryApiKeyRepository
    ):
        assert await service.resolve("not-a-key") is None
        assert await service.resolve("") is None
        assert repo.lookup_calls == 0

    async def test_plan_change_reflected(
        self, service: ApiKeyService, repo: InMemoryApiKeyRepository
    ):
        created = await service.create_key("user-free", "A")
        repo.accounts["user-free"].plan = PlanType.PRO

        identity = await service.resolve(created.plain_key)
        assert identity.plan == PlanType.PRO
