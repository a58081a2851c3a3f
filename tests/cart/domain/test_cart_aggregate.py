"""Tests for the Cart aggregate."""

import pytest

from storefront.cart.cart import Cart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartPromotionApplied
from storefront.errors import ValidationFailed
from storefront.promotions.pricing import Pricing


@pytest.fixture()
def cart():
    return Cart.create(user_id="u-1")


class TestAddItem:
    def test_new_line(self, cart):
        cart.add_item("p-1", 2, 9.5)
        assert cart.lines == [("p-1", 9.5, 2)]
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_existing_line_accumulates_and_refreshes_snapshot(self, cart):
        cart.add_item("p-1", 2, 9.5)
        cart.add_item("p-1", 1, 11.0)
        assert cart.lines == [("p-1", 11.0, 3)]
        assert cart._events[-1].line_quantity == 3

    def test_zero_quantity_is_rejected(self, cart):
        with pytest.raises(ValidationFailed):
            cart.add_item("p-1", 0, 9.5)


class TestRemoveItem:
    def test_removes_line(self, cart):
        cart.add_item("p-1", 1, 5.0)
        cart.add_item("p-2", 1, 6.0)
        assert cart.remove_item("p-1") is True
        assert [line[0] for line in cart.lines] == ["p-2"]
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_absent_line_is_a_no_op(self, cart):
        cart.add_item("p-1", 1, 5.0)
        assert cart.remove_item("p-9") is False
        assert len(cart.items) == 1


class TestClearAndPricing:
    def test_clear_drops_items_promotion_and_totals(self, cart):
        cart.add_item("p-1", 1, 5.0)
        cart.attach_promotion("promo-1", "CODE")
        cart.apply_pricing(Pricing(subtotal=5.0, discount=1.0, total=4.0))

        cart.clear()

        assert len(cart.items) == 0
        assert cart.promotion_id is None
        assert (cart.subtotal, cart.discount, cart.total) == (0.0, 0.0, 0.0)
        assert isinstance(cart._events[-1], CartCleared)

    def test_attach_promotion(self, cart):
        cart.attach_promotion("promo-1", "CODE")
        assert cart.promotion_id == "promo-1"
        assert isinstance(cart._events[-1], CartPromotionApplied)

    def test_apply_pricing_caches_totals(self, cart):
        cart.apply_pricing(Pricing(subtotal=50.0, discount=5.0, total=45.0))
        assert cart.total == 45.0
