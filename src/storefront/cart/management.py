"""Cart management — one lazily created cart per user.

Every mutation runs as a conditional update on the cart, and the cached
totals are recomputed from the line snapshots in the same update, so a cart
never persists a total that disagrees with its lines.
"""

import structlog

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.errors import LimitReached, NotFound, ProductNotFound, ValidationFailed
from storefront.ledger import LedgerStore
from storefront.promotions.catalog import PromotionCatalog
from storefront.promotions.pricing import PricingCalculator
from storefront.schemas import AddCartItem, parse

logger = structlog.get_logger(__name__)


class CartService:
    def __init__(self, store: LedgerStore, pricing: PricingCalculator, promotions: PromotionCatalog) -> None:
        self._store = store
        self._pricing = pricing
        self._promotions = promotions

    def cart_for(self, user_id) -> Cart:
        """The user's cart, created empty on first access."""
        with self._store.exclusive(Cart, f"user:{user_id}"):
            cart = self._store.find_one(Cart, user_id=str(user_id))
            if cart is None:
                cart = self._store.add(Cart.create(user_id=str(user_id)))
                logger.info("Cart created", cart_id=str(cart.id), user_id=str(user_id))
        return cart

    def _update(self, user_id, mutate) -> Cart:
        cart = self.cart_for(user_id)

        def apply(cart):
            mutate(cart)
            cart.apply_pricing(self._pricing.compute_cart_total(cart))

        return self._store.conditional_update(Cart, cart.id, apply)

    def add_cart_item(self, user_id, request) -> Cart:
        """Add units of a product at its current catalogue price."""
        request = parse(AddCartItem, request)
        try:
            product = self._store.get(Product, request.product_id)
        except NotFound as exc:
            raise ProductNotFound(request.product_id) from exc

        cart = self._update(
            user_id,
            lambda cart: cart.add_item(str(product.id), request.quantity, product.price),
        )
        logger.info(
            "Cart item added",
            cart_id=str(cart.id),
            product_id=str(product.id),
            quantity=request.quantity,
            total=cart.total,
        )
        return cart

    def remove_cart_item(self, user_id, product_id) -> Cart:
        """Drop a product's line. Removing a line the cart does not hold changes nothing."""
        cart = self._update(user_id, lambda cart: cart.remove_item(product_id))
        logger.info("Cart item removed", cart_id=str(cart.id), product_id=str(product_id), total=cart.total)
        return cart

    def clear_cart(self, user_id) -> Cart:
        cart = self.cart_for(user_id)
        cart = self._store.conditional_update(Cart, cart.id, lambda cart: cart.clear())
        logger.info("Cart cleared", cart_id=str(cart.id))
        return cart

    def apply_promotion(self, user_id, code) -> Cart:
        """Attach a promotion by code.

        Only a promotion that is redeemable right now can be attached. One that
        later expires or runs out stays attached but stops discounting.
        """
        promotion = self._promotions.by_code(code)
        if promotion.is_exhausted:
            raise LimitReached(promotion.id, promotion.usage_limit)
        if self._pricing.redeemable_promotion(promotion.id) is None:
            raise ValidationFailed({"code": [f"Promotion {promotion.code} is not currently active"]})

        cart = self._update(user_id, lambda cart: cart.attach_promotion(str(promotion.id), promotion.code))
        logger.info(
            "Promotion applied to cart",
            cart_id=str(cart.id),
            promotion_id=str(promotion.id),
            discount=cart.discount,
            total=cart.total,
        )
        return cart
