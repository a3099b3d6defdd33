"""SQLModel data models."""

from keygate.models.account import Account
from keygate.models.api_key import ApiKey
from keygate.models.plan import PlanType

# Rebuild models to resolve forward references between Account and ApiKey
Account.model_rebuild()
ApiKey.model_rebuild()

__all__ = [
    "Account",
    "ApiKey",
    "PlanType",
]
