"""Message templates for order notifications."""

from storefront.notifications.port import OrderConfirmation


def render_order_confirmation(confirmation: OrderConfirmation) -> dict:
    lines = "\n".join(
        f"  {quantity} x {product_id} @ {unit_price:.2f}" for product_id, quantity, unit_price in confirmation.lines
    )
    discount = f"Discount: -{confirmation.discount:.2f}\n" if confirmation.discount else ""
    return {
        "subject": f"Order #{confirmation.order_id} Confirmed",
        "body": (
            f"Your order #{confirmation.order_id} has been placed.\n\n"
            f"{lines}\n\n"
            f"Items: {confirmation.items_price:.2f}\n"
            f"{discount}"
            f"Order Total: {confirmation.total_price:.2f}\n\n"
            "We'll let you know when it ships."
        ),
    }
