"""Development email sender that writes messages to the log."""

from __future__ import annotations

import structlog

from keygate.services.email.base import EmailSender

logger = structlog.get_logger()


class LogEmailSender(EmailSender):
    """Logs each message instead of delivering it."""

    def __init__(self) -> None:
        self._log = logger.bind(component="email", transport="log")

    @property
    def name(self) -> str:
        return "log"

    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        self._log.info(
            "email.send",
            to=to_email,
            subject=subject,
            body_length=len(html_body),
        )
