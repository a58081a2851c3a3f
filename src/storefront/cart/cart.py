"""Cart aggregate — one per user, holding price-snapshotted lines.

Each line stores the unit price captured when it was last added to, so a
catalogue price change does not move the total of a cart in progress. The
cached ``total`` is recomputed by the pricing calculator on every mutation
and is never trusted on its own.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartPromotionApplied
from storefront.domain import storefront
from storefront.errors import ValidationFailed


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Unit price snapshot
    added_at = DateTime()


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    promotion_id = Identifier()
    subtotal = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            subtotal=0.0,
            discount=0.0,
            total=0.0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def lines(self):
        """(product_id, unit_price, quantity) for every line, in cart order."""
        return [(str(i.product_id), i.price, i.quantity) for i in self.items]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price):
        """Add units of a product, refreshing the line's price snapshot to ``unit_price``."""
        if quantity is None or quantity < 1:
            raise ValidationFailed({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.item_for(product_id)
        if existing:
            existing.quantity += quantity
            existing.price = unit_price
            line_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    quantity=quantity,
                    price=unit_price,
                    added_at=now,
                )
            )
            line_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line_quantity,
                unit_price=unit_price,
                added_at=now,
            )
        )

    def remove_item(self, product_id):
        """Drop the line for ``product_id``. Returns False if the cart had no such line."""
        item = self.item_for(product_id)
        if item is None:
            return False

        self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                removed_at=now,
            )
        )
        return True

    def clear(self):
        """Remove every line and the promotion, and zero the cached totals."""
        for item in list(self.items):
            self.remove_items(item)

        now = datetime.now(UTC)
        self.promotion_id = None
        self.subtotal = 0.0
        self.discount = 0.0
        self.total = 0.0
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                cleared_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def attach_promotion(self, promotion_id, code):
        now = datetime.now(UTC)
        self.promotion_id = promotion_id
        self.updated_at = now

        self.raise_(
            CartPromotionApplied(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                promotion_id=str(promotion_id),
                code=code,
                applied_at=now,
            )
        )

    def apply_pricing(self, pricing):
        self.subtotal = pricing.subtotal
        self.discount = pricing.discount
        self.total = pricing.total
