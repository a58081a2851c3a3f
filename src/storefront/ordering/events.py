"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """Stock was reserved for every line and the order was persisted."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    items_price = Float(required=True)
    discount = Float(default=0.0)
    total_price = Float(required=True)
    promotion_id = Identifier()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    payment_status = String(max_length=50)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderItemReleased:
    """A line's stock was returned while the order was being deleted."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDeleted:
    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    deleted_at = DateTime(required=True)
