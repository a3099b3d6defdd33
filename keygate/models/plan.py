"""Subscription plan tiers."""

from __future__ import annotations

from enum import Enum


class PlanType(str, Enum):
    """Closed set of subscription tiers, ordered from most to least restrictive."""

    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"
