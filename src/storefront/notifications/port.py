"""Order notifier port — the outbound side of order creation.

Notification is fire-and-forget: the coordinator calls ``order_placed`` once
the order is persisted and never lets a notifier failure reach the caller.
Adapters that do slow I/O should be wrapped in ``QueuedNotifier`` so the call
returns immediately.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OrderConfirmation:
    """Snapshot of a placed order, safe to hand to another thread."""

    order_id: str
    user_id: str
    item_count: int
    items_price: float
    discount: float
    total_price: float
    lines: tuple = ()  # (product_id, quantity, unit_price)

    @classmethod
    def from_order(cls, order) -> "OrderConfirmation":
        return cls(
            order_id=str(order.id),
            user_id=str(order.user_id),
            item_count=len(order.items),
            items_price=order.items_price,
            discount=order.discount,
            total_price=order.total_price,
            lines=tuple((str(i.product_id), i.quantity, i.price) for i in order.items),
        )


class OrderNotifier(ABC):
    @abstractmethod
    def order_placed(self, confirmation: OrderConfirmation) -> None:
        """Tell the customer their order was placed."""
        ...
