"""Tests for CartService: lazily created carts priced from line snapshots."""

from datetime import UTC, datetime, timedelta

import pytest

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.errors import LimitReached, NotFound, ProductNotFound, ValidationFailed

USER = "shopper-1"


class TestCartFor:
    def test_first_access_creates_an_empty_cart(self, shop, store):
        cart = shop.carts.cart_for(USER)
        assert cart.total == 0.0
        assert store.get(Cart, cart.id).user_id == USER

    def test_one_cart_per_user(self, shop, store):
        first = shop.carts.cart_for(USER)
        second = shop.carts.cart_for(USER)
        assert first.id == second.id
        assert len(store.find(Cart, user_id=USER)) == 1


class TestAddCartItem:
    def test_adds_line_at_current_price(self, shop, make_product):
        product = make_product(price=12.0)
        cart = shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 2})
        assert cart.lines == [(str(product.id), 12.0, 2)]
        assert cart.total == 24.0

    def test_quantity_defaults_to_one(self, shop, make_product):
        product = make_product(price=3.0)
        cart = shop.add_cart_item(USER, {"product_id": str(product.id)})
        assert cart.total == 3.0

    def test_later_addition_tracks_new_price(self, shop, store, make_product):
        product = make_product(price=10.0)
        shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 1})

        store.conditional_update(Product, product.id, lambda p: setattr(p, "price", 14.0))
        cart = shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 1})

        assert cart.lines == [(str(product.id), 14.0, 2)]
        assert cart.total == 28.0

    def test_unknown_product(self, shop):
        with pytest.raises(ProductNotFound):
            shop.add_cart_item(USER, {"product_id": "missing", "quantity": 1})

    def test_malformed_request(self, shop, make_product):
        product = make_product()
        with pytest.raises(ValidationFailed) as exc:
            shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 0})
        assert "quantity" in exc.value.messages

    def test_unknown_keys_are_rejected(self, shop, make_product):
        product = make_product()
        with pytest.raises(ValidationFailed):
            shop.add_cart_item(USER, {"product_id": str(product.id), "qty": 2})

    def test_adding_does_not_touch_stock(self, shop, store, make_product):
        product = make_product(stock=1)
        shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 5})
        assert store.get(Product, product.id).stock == 1


class TestRemoveAndClear:
    def test_remove_reprices(self, shop, make_product):
        a = make_product(price=10.0)
        b = make_product(price=5.0)
        shop.add_cart_item(USER, {"product_id": str(a.id), "quantity": 1})
        shop.add_cart_item(USER, {"product_id": str(b.id), "quantity": 2})

        cart = shop.remove_cart_item(USER, str(a.id))

        assert cart.total == 10.0
        assert [line[0] for line in cart.lines] == [str(b.id)]

    def test_remove_absent_line_changes_nothing(self, shop, make_product):
        product = make_product(price=10.0)
        shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 1})
        cart = shop.remove_cart_item(USER, "not-in-cart")
        assert cart.total == 10.0

    def test_clear(self, shop, store, make_product, make_promotion):
        product = make_product(price=10.0)
        promotion = make_promotion()
        shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 1})
        shop.carts.apply_promotion(USER, promotion.code)

        cart = shop.clear_cart(USER)

        stored = store.get(Cart, cart.id)
        assert len(stored.items) == 0
        assert stored.promotion_id is None
        assert stored.total == 0.0


class TestApplyPromotion:
    def test_applies_and_reprices(self, shop, make_product, make_promotion):
        product = make_product(price=50.0)
        promotion = make_promotion(code="half", discount_value=50.0)
        shop.add_cart_item(USER, {"product_id": str(product.id), "quantity": 2})

        cart = shop.carts.apply_promotion(USER, "HALF")

        assert cart.promotion_id == str(promotion.id)
        assert cart.discount == 50.0
        assert cart.total == 50.0

    def test_unknown_code(self, shop):
        with pytest.raises(NotFound):
            shop.carts.apply_promotion(USER, "NOPE")

    def test_exhausted_promotion(self, shop, make_promotion):
        promotion = make_promotion(usage_limit=1)
        shop.pricing.consume_promotion_usage(promotion.id)
        with pytest.raises(LimitReached):
            shop.carts.apply_promotion(USER, promotion.code)

    def test_promotion_outside_window(self, shop, make_promotion):
        now = datetime.now(UTC)
        promotion = make_promotion(starts_at=now + timedelta(days=1), ends_at=now + timedelta(days=2))
        with pytest.raises(ValidationFailed):
            shop.carts.apply_promotion(USER, promotion.code)

    def test_restricted_promotion_discounts_matching_lines(self, shop, make_product, make_promotion):
        shoes = make_product(price=80.0)
        socks = make_product(price=20.0)
        make_promotion(code="SHOES25", discount_value=25.0, product_ids=[str(shoes.id)])
        shop.add_cart_item(USER, {"product_id": str(shoes.id), "quantity": 1})
        shop.add_cart_item(USER, {"product_id": str(socks.id), "quantity": 1})

        cart = shop.carts.apply_promotion(USER, "shoes25")

        assert cart.discount == 20.0
        assert cart.total == 80.0
