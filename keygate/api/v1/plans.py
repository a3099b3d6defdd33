"""Plans API endpoints.

GET /v1/plans - List the plan catalog
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter
from pydantic import BaseModel

from keygate.models.plan import PlanType
from keygate.services import plans

router = APIRouter()


class PlanResponse(BaseModel):
    """Plan response model."""

    type: PlanType
    name: str
    price: Decimal
    max_api_keys: int
    daily_request_limit: int
    minute_request_limit: int
    has_rest_access: bool
    has_graphql_access: bool


class PlanListResponse(BaseModel):
    items: list[PlanResponse]


@router.get("", response_model=PlanListResponse)
async def list_plans() -> PlanListResponse:
    """List available plans, most restrictive first."""
    return PlanListResponse(
        items=[
            PlanResponse(
                type=p.plan,
                name=p.name,
                price=p.price,
                max_api_keys=p.max_api_keys,
                daily_request_limit=p.daily_request_limit,
                minute_request_limit=p.minute_request_limit,
                has_rest_access=p.has_rest_access,
                has_graphql_access=p.has_graphql_access,
            )
            for p in plans.list_plans()
        ]
    )
