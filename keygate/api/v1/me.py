"""Caller identity endpoint.

GET /v1/me - Identity resolved from the presented API key
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from keygate.api.dependencies import IdentityDep
from keygate.models.plan import PlanType
from keygate.services import plans

router = APIRouter()


class MeResponse(BaseModel):
    owner_id: str
    plan: PlanType
    auth_method: str
    api_key_id: str | None
    daily_request_limit: int
    minute_request_limit: int


@router.get("", response_model=MeResponse)
async def whoami(identity: IdentityDep) -> MeResponse:
    limits = plans.get_plan(identity.plan)
    return MeResponse(
        owner_id=identity.owner_id,
        plan=identity.plan,
        auth_method=identity.auth_method,
        api_key_id=identity.api_key_id,
        daily_request_limit=limits.daily_request_limit,
        minute_request_limit=limits.minute_request_limit,
    )
