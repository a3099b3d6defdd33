"""SQLModel-backed repository for accounts and API keys."""

from __future__ import annotations

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from keygate.concurrency import get_owner_lock
from keygate.models.account import Account
from keygate.models.api_key import ApiKey
from keygate.repositories.base import ApiKeyRepository, LimitResolver
from keygate.utils.datetime import utcnow

logger = structlog.get_logger()


class SqlApiKeyRepository(ApiKeyRepository):
    """API key storage on an async SQLAlchemy session.

    Write methods commit their own transaction so that the quota check of
    the next create for the same owner sees them.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self._db = db_session
        self._log = logger.bind(repository="api_key")

    async def get_account(self, account_id: str) -> Account | None:
        result = await self._db.execute(select(Account).where(Account.id == account_id))
        return result.scalars().first()

    async def save_account(self, account: Account) -> None:
        self._db.add(account)
        await self._db.commit()

    async def list_keys(self, owner_id: str) -> list[ApiKey]:
        result = await self._db.execute(
            select(ApiKey)
            .where(ApiKey.owner_id == owner_id)
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
        )
        return list(result.scalars().all())

    async def count_active(self, owner_id: str) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(ApiKey)
            .where(
                ApiKey.owner_id == owner_id,
                ApiKey.is_active == True,  # noqa: E712
            )
        )
        return int(result.scalar_one())

    async def add_if_below_limit(
        self,
        api_key: ApiKey,
        limit_for: LimitResolver,
    ) -> tuple[bool, int]:
        owner_id = api_key.owner_id

        # In-memory lock for single-instance deployments (SQLite doesn't support FOR UPDATE)
        owner_lock = get_owner_lock(owner_id)
        async with owner_lock:
            # Start a fresh transaction so counts reflect creates committed
            # by whoever held the lock before us
            await self._db.rollback()

            try:
                # FOR UPDATE serializes creates across instances on PostgreSQL/MySQL
                result = await self._db.execute(
                    select(Account).where(Account.id == owner_id).with_for_update()
                )
                account = result.scalars().first()
                if account is None:
                    await self._db.rollback()
                    return False, -1

                limit = limit_for(account)
                active = await self.count_active(owner_id)
                if active >= limit:
                    await self._db.rollback()
                    self._log.info(
                        "api_key.quota.rejected",
                        owner_id=owner_id,
                        active=active,
                        limit=limit,
                    )
                    return False, limit

                self._db.add(api_key)
                await self._db.commit()
            except BaseException:
                await self._db.rollback()
                raise

        await self._db.refresh(api_key)
        return True, limit

    async def get_key(self, owner_id: str, key_id: str) -> ApiKey | None:
        result = await self._db.execute(
            select(ApiKey).where(
                ApiKey.id == key_id,
                ApiKey.owner_id == owner_id,
            )
        )
        return result.scalars().first()

    async def deactivate(self, owner_id: str, key_id: str) -> bool:
        api_key = await self.get_key(owner_id, key_id)
        if api_key is None:
            return False

        if api_key.is_active:
            api_key.is_active = False
            api_key.deactivated_at = utcnow()
            await self._db.commit()
        return True

    async def delete(self, owner_id: str, key_id: str) -> bool:
        api_key = await self.get_key(owner_id, key_id)
        if api_key is None:
            return False

        await self._db.delete(api_key)
        await self._db.commit()
        return True

    async def find_active_by_hash(self, key_hash: str) -> tuple[ApiKey, Account] | None:
        result = await self._db.execute(
            select(ApiKey, Account)
            .join(Account, Account.id == ApiKey.owner_id)
            .where(
                ApiKey.key_hash == key_hash,
                ApiKey.is_active == True,  # noqa: E712
            )
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]
