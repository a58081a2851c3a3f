"""Pricing & Promotion Calculator.

Totals are always computed from the price snapshots stored on the lines, never
from live catalogue prices. A promotion that is missing, inactive, outside its
window or used up is ignored rather than rejected: the cart simply prices
without a discount. Consuming a promotion at checkout, on the other hand, is
strict and fails with LimitReached.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from storefront.errors import LimitReached, NotFound
from storefront.ledger import LedgerStore
from storefront.promotions.promotion import DiscountType, Promotion

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Pricing:
    """Outcome of pricing a set of lines."""

    subtotal: float
    discount: float
    total: float
    promotion_id: str | None = None  # Promotion that produced the discount, if any


def _utcnow() -> datetime:
    return datetime.now(UTC)


def subtotal_of(lines: Iterable[tuple]) -> float:
    return round(sum(price * quantity for _, price, quantity in lines), 2)


def discount_for(promotion: Promotion, lines: Iterable[tuple]) -> float:
    """Discount a promotion grants on ``(product_id, unit_price, quantity)`` lines.

    A product-restricted promotion only discounts the matching lines. The
    discount never exceeds the amount it applies to.
    """
    restricted = promotion.restricted_product_ids
    base = sum(price * quantity for product_id, price, quantity in lines if not restricted or product_id in restricted)
    if base <= 0:
        return 0.0

    if promotion.discount_type == DiscountType.PERCENTAGE.value:
        discount = base * promotion.discount_value / 100
    else:
        discount = promotion.discount_value

    return round(min(discount, base), 2)


class PricingCalculator:
    def __init__(self, store: LedgerStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def price_lines(self, lines, promotion_id=None) -> Pricing:
        lines = list(lines)
        subtotal = subtotal_of(lines)

        promotion = self.redeemable_promotion(promotion_id)
        discount = discount_for(promotion, lines) if promotion else 0.0

        return Pricing(
            subtotal=subtotal,
            discount=discount,
            total=round(max(subtotal - discount, 0.0), 2),
            promotion_id=str(promotion.id) if promotion and discount else None,
        )

    def compute_cart_total(self, cart) -> Pricing:
        """Price a cart's current lines with its attached promotion. Does not write."""
        return self.price_lines(cart.lines, cart.promotion_id)

    def promotion_in_effect(self, promotion_id):
        """The promotion if it exists, is active and is inside its window, else None.

        Usage is not checked here; see ``redeemable_promotion``.
        """
        if not promotion_id:
            return None

        try:
            promotion = self._store.get(Promotion, promotion_id)
        except NotFound:
            logger.info("Attached promotion no longer exists", promotion_id=str(promotion_id))
            return None

        if not promotion.is_active or not promotion.is_within_window(self._clock()):
            logger.debug("Attached promotion is not in effect", promotion_id=str(promotion_id))
            return None
        return promotion

    def redeemable_promotion(self, promotion_id):
        """The promotion if it can be applied right now, else None."""
        promotion = self.promotion_in_effect(promotion_id)
        if promotion is None or not promotion.is_redeemable(self._clock()):
            return None
        return promotion

    # -------------------------------------------------------------------
    # Usage
    # -------------------------------------------------------------------
    def consume_promotion_usage(self, promotion_id) -> Promotion:
        """Count one redemption, failing with LimitReached when the limit is used up."""
        try:
            promotion = self._store.conditional_update(Promotion, promotion_id, lambda p: p.consume_usage())
        except LimitReached:
            logger.warning("Promotion usage limit reached", promotion_id=str(promotion_id))
            raise

        logger.info(
            "Promotion usage consumed",
            promotion_id=str(promotion_id),
            used_count=promotion.used_count,
            usage_limit=promotion.usage_limit,
        )
        return promotion

    def release_promotion_usage(self, promotion_id) -> Promotion:
        """Hand back one redemption; used only to compensate a failed checkout."""
        promotion = self._store.conditional_update(Promotion, promotion_id, lambda p: p.release_usage())
        logger.info("Promotion usage released", promotion_id=str(promotion_id), used_count=promotion.used_count)
        return promotion
