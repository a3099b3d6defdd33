"""Email transport selection."""

from __future__ import annotations

from keygate.config import EmailConfig
from keygate.services.email.base import EmailSender
from keygate.services.email.http import HttpEmailSender
from keygate.services.email.log import LogEmailSender
from keygate.services.http import http_client_manager


def create_email_sender(config: EmailConfig) -> EmailSender:
    """Build the configured sender. Called once at startup."""
    if config.provider == "log":
        return LogEmailSender()
    elif config.provider == "http":
        return HttpEmailSender(config, lambda: http_client_manager.client)
    else:
        raise ValueError(f"Unsupported email provider: {config.provider}")


__all__ = ["EmailSender", "HttpEmailSender", "LogEmailSender", "create_email_sender"]
