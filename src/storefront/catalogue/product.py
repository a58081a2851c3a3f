"""Product aggregate — the shared record behind stock and rating aggregates.

Catalogue management (create, edit, delete) lives outside this core. The core
mutates two things on a Product:

    stock:        decremented by reservations, incremented by releases; never < 0
    rating,
    num_reviews:  derived from the product's Review records by the rating
                  recalculator; never edited directly
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Integer, String

from storefront.catalogue.events import ProductRatingRecalculated, StockReleased, StockReserved
from storefront.domain import storefront
from storefront.errors import InsufficientStock, ValidationFailed


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    rating = Float(default=0.0, min_value=0.0)
    num_reviews = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, stock=0):
        now = datetime.now(UTC)
        return cls(
            name=name,
            price=price,
            stock=stock,
            rating=0.0,
            num_reviews=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def reserve(self, quantity):
        """Take ``quantity`` units out of stock. Returns the unit price snapshot."""
        if quantity is None or quantity < 1:
            raise ValidationFailed({"quantity": ["Quantity must be at least 1"]})
        if self.stock < quantity:
            raise InsufficientStock(self.id, requested=quantity, available=self.stock)

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous - quantity
        self.updated_at = now

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                unit_price=self.price,
                reserved_at=now,
            )
        )
        return self.price

    def release(self, quantity):
        """Put ``quantity`` units back into stock."""
        if quantity is None or quantity < 1:
            raise ValidationFailed({"quantity": ["Quantity must be at least 1"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = previous + quantity
        self.updated_at = now

        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                released_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Review aggregate
    # -------------------------------------------------------------------
    def apply_review_stats(self, num_reviews, rating):
        now = datetime.now(UTC)
        self.num_reviews = num_reviews
        self.rating = rating if num_reviews else 0.0
        self.updated_at = now

        self.raise_(
            ProductRatingRecalculated(
                product_id=str(self.id),
                rating=self.rating,
                num_reviews=self.num_reviews,
                recalculated_at=now,
            )
        )
