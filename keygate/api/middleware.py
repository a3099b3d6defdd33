"""API key authentication gateway.

Every request outside the exempt path prefixes must carry
``Authorization: Bearer <api key>``. Outcomes, decided in one hop:

- exempt path          → passed through untouched
- no / non-bearer key  → 401 {"error": "API Key required"}
- unknown/revoked key  → 401 {"error": "Invalid API Key"}
- plan over quota      → 429, plan without REST access → 403
- otherwise            → request.state.identity = Identity(...), handler runs

Rejected requests never reach a handler.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from keygate.services import plans
from keygate.services.results import Identity
from keygate.services.usage import NullUsageMeter, UsageMeter

logger = structlog.get_logger()

IdentityResolver = Callable[[str], Awaitable[Identity | None]]

_BEARER_SCHEME = "bearer"
MISSING_KEY_MESSAGE = "API Key required"
INVALID_KEY_MESSAGE = "Invalid API Key"


def is_exempt(path: str, prefixes: Sequence[str]) -> bool:
    """Segment-aware prefix match: "/graphql" covers "/graphql" and "/graphql/x" only."""
    for prefix in prefixes:
        base = prefix.rstrip("/")
        if not base:
            continue
        if path == base or path.startswith(base + "/"):
            return True
    return False


def extract_bearer(authorization: str | None) -> str | None:
    """Return the bearer token, or None when absent or malformed.

    The scheme name is matched case-insensitively (RFC 7235).
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != _BEARER_SCHEME:
        return None
    return token.strip() or None


def _reject(status_code: int, message: str) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Resolves the presented API key and attaches the caller identity."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        resolver: IdentityResolver,
        exempt_prefixes: Sequence[str] = ("/graphql",),
        usage_meter: UsageMeter | None = None,
    ) -> None:
        super().__init__(app)
        self._resolver = resolver
        self._exempt_prefixes = tuple(exempt_prefixes)
        self._usage_meter = usage_meter if usage_meter is not None else NullUsageMeter()
        self._log = logger.bind(component="auth_gateway")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if is_exempt(path, self._exempt_prefixes):
            return await call_next(request)

        token = extract_bearer(request.headers.get("Authorization"))
        if token is None:
            self._log.info("auth.rejected", reason="missing", path=path)
            return _reject(401, MISSING_KEY_MESSAGE)

        identity = await self._resolver(token)
        if identity is None:
            self._log.info("auth.rejected", reason="invalid", path=path)
            return _reject(401, INVALID_KEY_MESSAGE)

        if not plans.has_feature(identity.plan, "rest"):
            self._log.info("auth.forbidden", owner_id=identity.owner_id, plan=identity.plan.value)
            return _reject(403, "Your plan does not include REST access")

        counts = await self._usage_meter.get_counts(identity.owner_id)
        if not plans.can_accept_request(identity.plan, counts.daily, counts.minute):
            self._log.info(
                "auth.rate_limited",
                owner_id=identity.owner_id,
                daily=counts.daily,
                minute=counts.minute,
            )
            return _reject(429, "Rate limit exceeded")

        request.state.identity = identity
        self._log.debug("auth.success", owner_id=identity.owner_id, key_id=identity.api_key_id)
        return await call_next(request)
