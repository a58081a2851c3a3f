"""In-process email adapter for development and tests."""

import threading
from uuid import uuid4

from storefront.notifications.email_port import DeliveryReceipt, EmailPort


class FakeEmailAdapter(EmailPort):
    """Keeps every message in ``outbox`` instead of sending it."""

    def __init__(self):
        self.outbox: list[dict] = []
        self.failure_reason: str | None = None
        self._lock = threading.Lock()

    def fail_with(self, reason: str = "Email delivery failed") -> None:
        """Make every following send report failure."""
        self.failure_reason = reason

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> DeliveryReceipt:
        if self.failure_reason:
            return DeliveryReceipt(status="failed", error=self.failure_reason)

        message_id = f"email-{uuid4().hex[:12]}"
        with self._lock:
            self.outbox.append({"message_id": message_id, "to": to, "subject": subject, "body": body})
        return DeliveryReceipt(status="sent", message_id=message_id)
