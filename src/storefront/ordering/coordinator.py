"""Order Lifecycle Coordinator — create, pay, deliver and delete orders.

Order creation is a saga over independently atomic steps:

    1. reserve stock for each line, in request order
    2. consume one use of the promotion, when there is one
    3. persist the order with its items

Each completed step records how to undo itself. When a later step fails the
recorded steps are undone newest first and the original failure is raised. If
an undo step itself fails, stock accounting is out of line with the orders on
record, and CompensationFailed is raised instead so an operator can step in.

Reservations are never held across a caller timeout: nothing here waits on
anything but the Ledger Store.
"""

import structlog

from storefront.auth import Principal, ensure_admin, ensure_owner_or_admin
from storefront.cart.cart import Cart
from storefront.cart.management import CartService
from storefront.catalogue.reservation import StockReservationEngine
from storefront.errors import CompensationFailed, EmptyOrder, ProductNotFound
from storefront.ledger import LedgerStore
from storefront.notifications.port import OrderConfirmation, OrderNotifier
from storefront.ordering.compensation import Compensation
from storefront.ordering.order import Order
from storefront.promotions.pricing import PricingCalculator, discount_for
from storefront.schemas import Checkout, PaymentResult, PlaceOrder, parse

logger = structlog.get_logger(__name__)


class OrderLifecycleCoordinator:
    def __init__(
        self,
        store: LedgerStore,
        reservations: StockReservationEngine,
        pricing: PricingCalculator,
        notifier: OrderNotifier,
        carts: CartService | None = None,
    ) -> None:
        self._store = store
        self._reservations = reservations
        self._pricing = pricing
        self._notifier = notifier
        self._carts = carts

    # -------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------
    def create_order(self, user_id, request) -> Order:
        """Reserve stock for every line, then persist the order.

        Raises EmptyOrder, ProductNotFound, InsufficientStock or LimitReached
        with stock left as it was, or CompensationFailed when it could not be.
        """
        request = parse(PlaceOrder, request)
        if not request.line_items:
            raise EmptyOrder()

        lines = [(item.product_id, item.quantity) for item in request.line_items]
        order = self._place(user_id, lines, request, request.promotion_id)
        self._notify(order)
        return order

    def checkout(self, user_id, request=None) -> Order:
        """Turn the user's cart into an order and empty the cart.

        The cart's promotion is consumed afresh here, so a promotion that ran
        out after it was attached fails the checkout with LimitReached.
        """
        if self._carts is None:
            raise RuntimeError("Checkout needs a CartService")

        request = parse(Checkout, request or {})
        cart = self._carts.cart_for(user_id)

        # Held until the cart is cleared, so nothing added meanwhile is lost
        with self._store.exclusive(Cart, cart.id):
            cart = self._store.get(Cart, cart.id)
            if not cart.items:
                raise EmptyOrder()

            lines = [(str(item.product_id), item.quantity) for item in cart.items]
            order = self._place(user_id, lines, request, cart.promotion_id)

            try:
                self._carts.clear_cart(user_id)
            except Exception as exc:
                # The order stands; a stale cart is only an inconvenience
                logger.error("Cart not cleared after checkout", user_id=str(user_id), order_id=str(order.id), error=str(exc))

        self._notify(order)
        return order

    def _place(self, user_id, lines, charges, promotion_id) -> Order:
        compensation = Compensation()
        try:
            granted = []
            for product_id, quantity in lines:
                reservation = self._reservations.reserve(product_id, quantity)
                compensation.record(
                    f"release {quantity} of product {reservation.product_id}",
                    lambda r=reservation: self._reservations.release(r.product_id, r.quantity),
                )
                granted.append(reservation)

            discount = 0.0
            promotion = self._pricing.promotion_in_effect(promotion_id)
            if promotion is not None:
                discount = discount_for(promotion, [(r.product_id, r.unit_price, r.quantity) for r in granted])

            applied_promotion_id = None
            if discount:
                self._pricing.consume_promotion_usage(promotion.id)
                compensation.record(
                    f"release one use of promotion {promotion.id}",
                    lambda: self._pricing.release_promotion_usage(promotion.id),
                )
                applied_promotion_id = str(promotion.id)

            order = Order.place(
                user_id=str(user_id),
                reservations=granted,
                shipping_address=charges.shipping_address.model_dump() if charges.shipping_address else None,
                payment_method=charges.payment_method,
                shipping_price=charges.shipping_price,
                tax_price=charges.tax_price,
                discount=discount,
                promotion_id=applied_promotion_id,
            )
            self._store.add(order)
        except Exception as exc:
            self._compensate(user_id, compensation, exc)
            raise

        logger.info(
            "Order created",
            order_id=str(order.id),
            user_id=str(user_id),
            item_count=len(granted),
            total_price=order.total_price,
        )
        return order

    @staticmethod
    def _compensate(user_id, compensation: Compensation, cause: Exception) -> None:
        if not len(compensation):
            return

        steps = len(compensation)
        failures = compensation.unwind()
        if failures:
            logger.error(
                "Order creation compensation failed",
                user_id=str(user_id),
                cause=str(cause),
                failed_steps=[description for description, _ in failures],
            )
            raise CompensationFailed(cause, failures) from cause

        logger.warning(
            "Order creation rolled back",
            user_id=str(user_id),
            cause=type(cause).__name__,
            steps_undone=steps,
        )

    def _notify(self, order: Order) -> None:
        try:
            self._notifier.order_placed(OrderConfirmation.from_order(order))
        except Exception as exc:
            logger.error("Order notification failed", order_id=str(order.id), error=str(exc))

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def mark_paid(self, order_id, payment_result=None) -> Order:
        """Record payment. Calling it again on a paid order changes nothing."""
        result = parse(PaymentResult, payment_result).model_dump() if payment_result is not None else None
        order = self._store.conditional_update(Order, order_id, lambda o: o.mark_paid(result))
        logger.info("Order marked paid", order_id=str(order_id), paid_at=str(order.paid_at))
        return order

    def mark_delivered(self, order_id) -> Order:
        order = self._store.conditional_update(Order, order_id, lambda o: o.mark_delivered())
        logger.info("Order marked delivered", order_id=str(order_id), delivered_at=str(order.delivered_at))
        return order

    # -------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------
    def delete_order(self, order_id) -> None:
        """Return every line's stock, then remove the order.

        Lines are dropped from the stored order as their stock goes back, so
        a failed deletion can simply be retried. A line whose product no
        longer exists has nothing to return to and is dropped as well.

        The whole deletion holds the order's lock. A concurrent delete finds
        the order gone and raises NotFound without releasing anything.
        """
        with self._store.exclusive(Order, order_id):
            order = self._store.get(Order, order_id)

            for item in list(order.items):
                try:
                    self._reservations.release(item.product_id, item.quantity)
                except ProductNotFound:
                    logger.warning(
                        "Product gone, stock not returned",
                        order_id=str(order_id),
                        product_id=str(item.product_id),
                        quantity=item.quantity,
                    )
                order = self._store.conditional_update(Order, order_id, lambda o, i=item: o.drop_released_item(i.id))

            order = self._store.conditional_update(Order, order_id, lambda o: o.mark_deleted())
            self._store.remove(order)
        logger.info("Order deleted", order_id=str(order_id))

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, order_id, principal: Principal) -> Order:
        order = self._store.get(Order, order_id)
        ensure_owner_or_admin(principal, order.user_id, "view this order")
        return order

    def orders_for_user(self, user_id) -> list[Order]:
        orders = self._store.find(Order, user_id=str(user_id))
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def all_orders(self, principal: Principal) -> list[Order]:
        """Every order on record, newest first. Admins only."""
        ensure_admin(principal, "list all orders")
        return sorted(self._store.find(Order), key=lambda o: o.created_at, reverse=True)
