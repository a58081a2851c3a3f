"""Tests for discount arithmetic."""

from datetime import UTC, datetime, timedelta

from storefront.promotions.pricing import discount_for, subtotal_of
from storefront.promotions.promotion import Promotion


def _promotion(discount_type="percentage", value=20.0, product_ids=None):
    now = datetime.now(UTC)
    return Promotion.create(
        name="Rule",
        code="RULE",
        discount_type=discount_type,
        discount_value=value,
        starts_at=now - timedelta(days=1),
        ends_at=now + timedelta(days=1),
        product_ids=product_ids,
    )


class TestSubtotal:
    def test_sums_price_times_quantity(self):
        assert subtotal_of([("a", 10.0, 2), ("b", 5.5, 4)]) == 42.0

    def test_empty(self):
        assert subtotal_of([]) == 0


class TestDiscount:
    def test_percentage(self):
        assert discount_for(_promotion(value=20.0), [("a", 50.0, 2)]) == 20.0

    def test_fixed(self):
        assert discount_for(_promotion("fixed", 15.0), [("a", 50.0, 2)]) == 15.0

    def test_fixed_is_capped_at_subtotal(self):
        assert discount_for(_promotion("fixed", 150.0), [("a", 100.0, 1)]) == 100.0

    def test_restricted_promotion_discounts_matching_lines_only(self):
        promotion = _promotion(value=50.0, product_ids=["a"])
        assert discount_for(promotion, [("a", 10.0, 2), ("b", 100.0, 1)]) == 10.0

    def test_restricted_promotion_without_matching_lines(self):
        promotion = _promotion("fixed", 5.0, product_ids=["z"])
        assert discount_for(promotion, [("a", 10.0, 1)]) == 0.0
