"""Order aggregate — a priced, stock-backed record of a purchase.

An Order is created once, after every line's stock has been reserved, and is
never re-priced afterwards. Paid and delivered are independent flags, each
with its own timestamp; setting one does not require the other.

Deleting an order returns each line's stock. Lines are dropped from the order
one at a time as their stock goes back, so a deletion interrupted half-way can
be retried without releasing a line twice.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.errors import EmptyOrder
from storefront.ordering.events import (
    OrderDeleted,
    OrderDelivered,
    OrderItemReleased,
    OrderPaid,
    OrderPlaced,
)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships to, captured at checkout and never updated."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class PaymentResult:
    """What the payment provider reported when the order was paid."""

    payment_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)
    email_address = String(max_length=255)
    update_time = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Unit price snapshot
    total = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(max_length=50)
    payment_result = ValueObject(PaymentResult)
    items_price = Float(default=0.0, min_value=0.0)
    shipping_price = Float(default=0.0, min_value=0.0)
    tax_price = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total_price = Float(default=0.0, min_value=0.0)
    promotion_id = Identifier()
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    created_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        reservations,
        shipping_address=None,
        payment_method=None,
        shipping_price=0.0,
        tax_price=0.0,
        discount=0.0,
        promotion_id=None,
    ):
        """Build an order from granted reservations.

        ``reservations`` carry product_id, quantity and unit_price. Line totals
        are quantity × unit price; ``discount`` comes off the items price only.
        """
        if not reservations:
            raise EmptyOrder()

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=r.product_id,
                quantity=r.quantity,
                price=r.unit_price,
                total=round(r.quantity * r.unit_price, 2),
            )
            for r in reservations
        ]
        items_price = round(sum(item.total for item in items), 2)
        discount = round(min(discount or 0.0, items_price), 2)
        total_price = round(max(items_price - discount, 0.0) + shipping_price + tax_price, 2)

        order = cls(
            user_id=user_id,
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            payment_method=payment_method,
            items_price=items_price,
            shipping_price=shipping_price,
            tax_price=tax_price,
            discount=discount,
            total_price=total_price,
            promotion_id=promotion_id,
            is_paid=False,
            is_delivered=False,
            created_at=now,
        )
        for item in items:
            order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                item_count=len(items),
                items_price=items_price,
                discount=discount,
                total_price=total_price,
                promotion_id=str(promotion_id) if promotion_id else None,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def mark_paid(self, payment_result=None, paid_at=None):
        """Record payment. A second call leaves the first payment untouched."""
        if self.is_paid:
            return False

        paid_at = paid_at or datetime.now(UTC)
        self.is_paid = True
        self.paid_at = paid_at
        if payment_result:
            self.payment_result = PaymentResult(**payment_result)

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_id=payment_result.get("payment_id") if payment_result else None,
                payment_status=payment_result.get("status") if payment_result else None,
                amount=self.total_price,
                paid_at=paid_at,
            )
        )
        return True

    def mark_delivered(self, delivered_at=None):
        if self.is_delivered:
            return False

        delivered_at = delivered_at or datetime.now(UTC)
        self.is_delivered = True
        self.delivered_at = delivered_at

        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=delivered_at))
        return True

    # -------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------
    def item_for(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def drop_released_item(self, item_id):
        """Remove a line whose stock has already been returned."""
        item = self.item_for(item_id)
        if item is None:
            return

        self.remove_items(item)
        self.raise_(
            OrderItemReleased(
                order_id=str(self.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
                released_at=datetime.now(UTC),
            )
        )

    def mark_deleted(self):
        self.raise_(
            OrderDeleted(
                order_id=str(self.id),
                user_id=str(self.user_id),
                deleted_at=datetime.now(UTC),
            )
        )
