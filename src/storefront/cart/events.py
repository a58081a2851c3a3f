"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # Units added by this call
    line_quantity = Integer(required=True)  # Units on the line afterwards
    unit_price = Float(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    removed_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    cleared_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class CartPromotionApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    promotion_id = Identifier(required=True)
    code = String(required=True)
    applied_at = DateTime(required=True)
