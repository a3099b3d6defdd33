"""Subscription plan catalog.

Defines key quotas, request ceilings and feature flags for each tier.
The table is fixed at import time and read-only.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from keygate.models.plan import PlanType


class PlanLimits(BaseModel):
    """Limits and features of one plan tier."""

    model_config = ConfigDict(frozen=True)

    plan: PlanType
    name: str
    price: Decimal
    max_api_keys: int
    daily_request_limit: int
    minute_request_limit: int
    monthly_request_limit: int
    has_rest_access: bool
    has_graphql_access: bool


PLANS: dict[PlanType, PlanLimits] = {
    PlanType.FREE: PlanLimits(
        plan=PlanType.FREE,
        name="Free",
        price=Decimal("0"),
        max_api_keys=1,
        daily_request_limit=500,
        minute_request_limit=10,
        monthly_request_limit=1000,
        has_rest_access=True,
        has_graphql_access=False,
    ),
    PlanType.PREMIUM: PlanLimits(
        plan=PlanType.PREMIUM,
        name="Premium",
        price=Decimal("9.99"),
        max_api_keys=3,
        daily_request_limit=25000,
        minute_request_limit=100,
        monthly_request_limit=10000,
        has_rest_access=True,
        has_graphql_access=False,
    ),
    PlanType.PRO: PlanLimits(
        plan=PlanType.PRO,
        name="Pro",
        price=Decimal("49.99"),
        max_api_keys=10,
        daily_request_limit=250000,
        minute_request_limit=1000,
        monthly_request_limit=100000,
        has_rest_access=True,
        has_graphql_access=True,
    ),
}

# Unknown tiers resolve here
_FALLBACK_PLAN = PlanType.FREE


def _coerce(plan: PlanType | str | None) -> PlanType:
    if isinstance(plan, PlanType):
        return plan
    if isinstance(plan, str):
        try:
            return PlanType(plan.lower())
        except ValueError:
            return _FALLBACK_PLAN
    return _FALLBACK_PLAN


def get_plan(plan: PlanType | str | None) -> PlanLimits:
    """Get plan limits; unknown tiers get the most restrictive plan."""
    return PLANS.get(_coerce(plan), PLANS[_FALLBACK_PLAN])


def list_plans() -> list[PlanLimits]:
    """All plans, most restrictive first."""
    return [PLANS[p] for p in PlanType]


def can_create_key(plan: PlanType | str | None, active_count: int) -> bool:
    """Whether an owner with ``active_count`` active keys may create another."""
    return active_count < get_plan(plan).max_api_keys


def can_accept_request(
    plan: PlanType | str | None,
    daily_count: int,
    minute_count: int,
) -> bool:
    """Whether both request counters are strictly below the plan ceilings."""
    limits = get_plan(plan)
    return (
        daily_count < limits.daily_request_limit
        and minute_count < limits.minute_request_limit
    )


def has_feature(plan: PlanType | str | None, feature: str) -> bool:
    """Check a feature gate ("rest" or "graphql")."""
    limits = get_plan(plan)
    if feature == "rest":
        return limits.has_rest_access
    if feature == "graphql":
        return limits.has_graphql_access
    return False
