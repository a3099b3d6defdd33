"""Keygate error types.

Errors raised here terminate a request and are rendered by the exception
handler registered in ``keygate.main``. Expected business outcomes
(key not found, plan limit reached, cooldown active) are NOT errors; they
are returned as ``ServiceResult`` values.
"""

from __future__ import annotations

from typing import Any


class KeygateError(Exception):
    """Base class for errors rendered as JSON responses."""

    code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str = "Internal error",
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Serialize to the error response body."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "request_id": request_id,
                "details": self.details,
            }
        }


class UnauthorizedError(KeygateError):
    code = "unauthorized"
    status_code = 401


class ForbiddenError(KeygateError):
    code = "forbidden"
    status_code = 403


class NotFoundError(KeygateError):
    code = "not_found"
    status_code = 404


class ValidationError(KeygateError):
    code = "validation_error"
    status_code = 400


class RequestTimeoutError(KeygateError):
    code = "timeout"
    status_code = 504


class EmailDeliveryError(KeygateError):
    """Raised by email senders when the transport rejects a message."""

    code = "email_delivery_failed"
    status_code = 502
