"""FastAPI dependencies for the Keygate API.

Provides dependency injection for:
- Database sessions and the API key repository
- ApiKeyService / AccountService
- The caller identity (API key gateway) and account id (identity provider)
"""

from __future__ import annotations

import hmac
from typing import Annotated

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from keygate.config import get_settings
from keygate.db.session import get_async_session, get_session_dependency
from keygate.errors import UnauthorizedError
from keygate.repositories import ApiKeyRepository, SqlApiKeyRepository
from keygate.services.account import AccountService
from keygate.services.api_key import ApiKeyService
from keygate.services.results import Identity

logger = structlog.get_logger()


async def get_repository(
    session: Annotated[AsyncSession, Depends(get_session_dependency)],
) -> ApiKeyRepository:
    return SqlApiKeyRepository(session)


async def get_api_key_service(
    repository: Annotated[ApiKeyRepository, Depends(get_repository)],
) -> ApiKeyService:
    return ApiKeyService(repository)


async def get_account_service(
    request: Request,
    repository: Annotated[ApiKeyRepository, Depends(get_repository)],
) -> AccountService:
    """AccountService with the process-wide email sender and cooldown."""
    state = request.app.state
    return AccountService(
        repository=repository,
        email_sender=state.email_sender,
        cooldown=state.cooldown,
    )


def get_identity(request: Request) -> Identity:
    """Identity attached by ApiKeyMiddleware.

    Raises:
        UnauthorizedError: If the route was reached without the gateway
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise UnauthorizedError("API Key required")
    return identity


def get_account_id(request: Request) -> str:
    """Account id asserted by the upstream identity provider.

    Authentication flow:
    1. If a proxy secret is configured, the request must carry it
    2. Else only development mode (trust_account_header) accepts the header
    3. Otherwise → 401 Unauthorized

    Raises:
        UnauthorizedError: If the header is missing or not trusted
    """
    security = get_settings().security
    account_id = request.headers.get(security.account_header, "").strip()
    if not account_id:
        raise UnauthorizedError("Account authentication required")

    if security.proxy_secret:
        presented = request.headers.get(security.proxy_secret_header, "")
        if hmac.compare_digest(presented.encode(), security.proxy_secret.encode()):
            return account_id
        logger.info("auth.account.rejected", reason="bad_proxy_secret")
        raise UnauthorizedError("Account authentication required")

    if security.trust_account_header:
        # Development mode: accept the header as-is
        return account_id

    logger.info("auth.account.rejected", reason="untrusted_header")
    raise UnauthorizedError("Account authentication required")


async def resolve_identity(token: str) -> Identity | None:
    """Default gateway resolver: one short-lived session per lookup."""
    async with get_async_session() as session:
        return await ApiKeyService(SqlApiKeyRepository(session)).resolve(token)


# Type aliases for cleaner dependency injection
RepositoryDep = Annotated[ApiKeyRepository, Depends(get_repository)]
ApiKeyServiceDep = Annotated[ApiKeyService, Depends(get_api_key_service)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
IdentityDep = Annotated[Identity, Depends(get_identity)]
AccountIdDep = Annotated[str, Depends(get_account_id)]
