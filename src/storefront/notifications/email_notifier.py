"""Order notifier that sends an order-confirmation email."""

from collections.abc import Callable

import structlog

from storefront.notifications.email_port import EmailPort
from storefront.notifications.port import OrderConfirmation, OrderNotifier
from storefront.notifications.templates import render_order_confirmation

logger = structlog.get_logger(__name__)


class EmailOrderNotifier(OrderNotifier):
    """Emails the order owner.

    ``recipient_for(user_id)`` resolves a user's address; it belongs to the
    user directory, which lives outside this core. Users without an address
    are skipped.
    """

    def __init__(self, email: EmailPort, recipient_for: Callable[[str], str | None]) -> None:
        self._email = email
        self._recipient_for = recipient_for

    def order_placed(self, confirmation: OrderConfirmation) -> None:
        to = self._recipient_for(confirmation.user_id)
        if not to:
            logger.info("No email address for order owner", order_id=confirmation.order_id)
            return

        content = render_order_confirmation(confirmation)
        receipt = self._email.send(to=to, subject=content["subject"], body=content["body"])
        if not receipt.sent:
            raise RuntimeError(receipt.error or "Unknown dispatch error")

        logger.info(
            "Order confirmation sent",
            order_id=confirmation.order_id,
            message_id=receipt.message_id,
        )
