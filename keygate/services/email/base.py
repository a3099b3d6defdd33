"""Email sender interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class EmailSender(ABC):
    """Outbound email transport.

    Implementations raise ``EmailDeliveryError`` when the transport
    rejects a message.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport name (for logging)."""
        ...

    @abstractmethod
    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        """Send an HTML email."""
        ...
