"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer

from storefront.domain import storefront


@storefront.event(part_of="Product")
class StockReserved:
    """Stock was decremented for an order line."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    unit_price = Float(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockReleased:
    """Stock was returned, after an order was deleted or a reservation compensated."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRatingRecalculated:
    __version__ = 1

    product_id = Identifier(required=True)
    rating = Float(required=True)
    num_reviews = Integer(required=True)
    recalculated_at = DateTime(required=True)
