from storefront.notifications.dispatch import QueuedNotifier
from storefront.notifications.email_notifier import EmailOrderNotifier
from storefront.notifications.port import OrderConfirmation, OrderNotifier

__all__ = ["EmailOrderNotifier", "OrderConfirmation", "OrderNotifier", "QueuedNotifier"]
