"""Domain events for the Promotion aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Promotion")
class PromotionCreated:
    __version__ = 1

    promotion_id = Identifier(required=True)
    code = String(required=True)
    discount_type = String(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Promotion")
class PromotionUsageConsumed:
    """One redemption was counted against the promotion's usage limit."""

    __version__ = 1

    promotion_id = Identifier(required=True)
    used_count = Integer(required=True)
    usage_limit = Integer()
    consumed_at = DateTime(required=True)


@storefront.event(part_of="Promotion")
class PromotionUsageReleased:
    """A redemption was handed back after checkout failed."""

    __version__ = 1

    promotion_id = Identifier(required=True)
    used_count = Integer(required=True)
    released_at = DateTime(required=True)
