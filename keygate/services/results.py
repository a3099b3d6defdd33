"""Result types for service operations.

Expected failures (not found, limit reached, cooldown active) are returned
as values so callers must branch on ``success``; only unexpected faults
raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel

from keygate.models.plan import PlanType


class FailureKind(str, Enum):
    """Tag for a failed ServiceResult."""

    NOT_FOUND = "not_found"
    LIMIT_EXCEEDED = "limit_exceeded"
    RATE_LIMITED = "rate_limited"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"


@dataclass
class ServiceResult:
    """Outcome of a service operation with a human-readable message."""

    success: bool
    message: str | None = None
    failure: FailureKind | None = None
    retry_after: timedelta | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> "ServiceResult":
        return cls(success=True, message=message)

    @classmethod
    def fail(
        cls,
        message: str,
        failure: FailureKind = FailureKind.INVALID,
        *,
        retry_after: timedelta | None = None,
    ) -> "ServiceResult":
        return cls(success=False, message=message, failure=failure, retry_after=retry_after)


class ApiKeyView(BaseModel):
    """API key as shown to its owner; never carries the plaintext."""

    id: str
    name: str
    key_preview: str
    is_active: bool
    created_at: datetime
    last_used_at: datetime | None = None


@dataclass
class ApiKeyCreateResult(ServiceResult):
    """Result of key creation.

    ``plain_key`` is populated only here, once; it is not retrievable later.
    """

    plain_key: str | None = None
    api_key: ApiKeyView | None = None

    @classmethod
    def created(cls, plain_key: str, api_key: ApiKeyView) -> "ApiKeyCreateResult":
        return cls(
            success=True,
            message="API key created successfully.",
            plain_key=plain_key,
            api_key=api_key,
        )

    @classmethod
    def fail(
        cls,
        message: str,
        failure: FailureKind = FailureKind.INVALID,
        *,
        retry_after: timedelta | None = None,
    ) -> "ApiKeyCreateResult":
        return cls(success=False, message=message, failure=failure, retry_after=retry_after)


@dataclass(frozen=True)
class Identity:
    """Caller identity attached to a request by the API key gateway."""

    owner_id: str
    plan: PlanType
    auth_method: str = "api_key"
    api_key_id: str | None = None


class ProfileView(BaseModel):
    """Account profile with plan usage figures."""

    id: str
    email: str
    first_name: str
    last_name: str
    plan: PlanType
    email_confirmed: bool
    created_at: datetime
    api_key_count: int
    max_api_keys: int
    # Metering is not implemented; always 0
    monthly_requests: int = 0
    max_monthly_requests: int
