"""Account API endpoints.

Authenticated by the upstream identity provider: the X-Account-Id header,
honored only behind the trusted proxy (or in development mode). Not by API keys.

GET    /account/keys               - List API keys
POST   /account/keys               - Create an API key (plaintext shown once)
POST   /account/keys/{id}/revoke   - Revoke an API key
DELETE /account/keys/{id}          - Delete an API key
GET    /account/profile            - Profile with plan figures
PUT    /account/profile            - Update first/last name
POST   /account/resend-confirmation
GET    /account/confirm-email?userId=..&token=.. (link target)
"""

from __future__ import annotations

import math

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from keygate.api.dependencies import AccountIdDep, AccountServiceDep, ApiKeyServiceDep
from keygate.errors import NotFoundError
from keygate.services.results import ApiKeyView, FailureKind, ProfileView, ServiceResult

router = APIRouter(prefix="/account", tags=["account"])

_FAILURE_STATUS = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.LIMIT_EXCEEDED: 400,
    FailureKind.RATE_LIMITED: 429,
    FailureKind.INVALID: 400,
    FailureKind.UNAVAILABLE: 503,
}


class CreateKeyRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class KeyListResponse(BaseModel):
    items: list[ApiKeyView]


class UpdateProfileRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)


def _result_response(result: ServiceResult, **extra) -> JSONResponse:
    """Render a ServiceResult; failures map to a status by their kind."""
    body = {"success": result.success, "message": result.message, **extra}
    if result.success:
        return JSONResponse(status_code=200, content=body)

    headers = None
    if result.retry_after is not None:
        headers = {"Retry-After": str(math.ceil(result.retry_after.total_seconds()))}
    status_code = _FAILURE_STATUS.get(result.failure, 400)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@router.get("/keys", response_model=KeyListResponse)
async def list_keys(account_id: AccountIdDep, service: ApiKeyServiceDep) -> KeyListResponse:
    return KeyListResponse(items=await service.list_keys(account_id))


@router.post("/keys")
async def create_key(
    body: CreateKeyRequest,
    account_id: AccountIdDep,
    service: ApiKeyServiceDep,
) -> JSONResponse:
    result = await service.create_key(account_id, body.name)
    if not result.success:
        return _result_response(result)
    return _result_response(
        result,
        plain_key=result.plain_key,
        api_key=result.api_key.model_dump(mode="json") if result.api_key else None,
    )


@router.post("/keys/{key_id}/revoke")
async def revoke_key(key_id: str, account_id: AccountIdDep, service: ApiKeyServiceDep) -> JSONResponse:
    return _result_response(await service.revoke_key(account_id, key_id))


@router.delete("/keys/{key_id}")
async def delete_key(key_id: str, account_id: AccountIdDep, service: ApiKeyServiceDep) -> JSONResponse:
    return _result_response(await service.delete_key(account_id, key_id))


@router.get("/profile", response_model=ProfileView)
async def get_profile(account_id: AccountIdDep, service: AccountServiceDep) -> ProfileView:
    profile = await service.get_profile(account_id)
    if profile is None:
        raise NotFoundError("User not found.")
    return profile


@router.put("/profile")
async def update_profile(
    body: UpdateProfileRequest,
    account_id: AccountIdDep,
    service: AccountServiceDep,
) -> JSONResponse:
    return _result_response(
        await service.update_profile(account_id, body.first_name, body.last_name)
    )


@router.post("/resend-confirmation")
async def resend_confirmation(
    request: Request,
    account_id: AccountIdDep,
    service: AccountServiceDep,
) -> JSONResponse:
    base_url = str(request.base_url).rstrip("/")
    return _result_response(await service.resend_confirmation(account_id, base_url))


@router.get("/confirm-email")
async def confirm_email(
    service: AccountServiceDep,
    user_id: str = Query(alias="userId", min_length=1),
    token: str = Query(min_length=1),
) -> JSONResponse:
    """Target of the emailed link; the token itself proves ownership."""
    return _result_response(await service.confirm_email(user_id, token))
