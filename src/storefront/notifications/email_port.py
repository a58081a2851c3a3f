"""Outbound email port used by the order notifier."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class DeliveryReceipt:
    status: str  # "sent" or "failed"
    message_id: str | None = None
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.status == "sent"


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> DeliveryReceipt:
        """Hand one message to the mail relay. Failures are reported, not raised."""
        ...
