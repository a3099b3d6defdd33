"""Email sender for REST mail providers."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from keygate.config import EmailConfig
from keygate.errors import EmailDeliveryError
from keygate.services.email.base import EmailSender

logger = structlog.get_logger()


class HttpEmailSender(EmailSender):
    """POSTs messages as JSON to a provider endpoint.

    Body: ``{"from": {"email", "name"}, "to": [email], "subject", "html"}``
    with the provider key as a bearer token.
    """

    def __init__(
        self,
        config: EmailConfig,
        client_factory: Callable[[], httpx.AsyncClient],
    ) -> None:
        if not config.endpoint:
            raise ValueError("email.endpoint is required for the http provider")
        self._config = config
        self._client_factory = client_factory
        self._log = logger.bind(component="email", transport="http")

    @property
    def name(self) -> str:
        return "http"

    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        payload = {
            "from": {"email": self._config.sender, "name": self._config.sender_name},
            "to": [to_email],
            "subject": subject,
            "html": html_body,
        }

        try:
            response = await self._client_factory().post(
                self._config.endpoint,
                json=payload,
                headers=headers,
                timeout=self._config.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._log.error(
                "email.send.rejected",
                to=to_email,
                status_code=e.response.status_code,
            )
            raise EmailDeliveryError(
                "Email provider rejected the message",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            self._log.error("email.send.failed", to=to_email, error=str(e))
            raise EmailDeliveryError("Email provider unreachable") from e

        self._log.info("email.send", to=to_email, subject=subject)
