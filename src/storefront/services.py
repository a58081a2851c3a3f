"""Default wiring of the storefront core for one Protean domain.

Every service takes its collaborators as arguments; this facade only builds
the usual set so callers need not. Pass a notifier to replace the default,
which emails through the fake adapter on a background thread.
"""

from protean.domain import Domain

from storefront.cart.management import CartService
from storefront.catalogue.reservation import StockReservationEngine
from storefront.ledger import LedgerStore
from storefront.notifications import EmailOrderNotifier, OrderNotifier, QueuedNotifier
from storefront.notifications.fake_email import FakeEmailAdapter
from storefront.ordering.coordinator import OrderLifecycleCoordinator
from storefront.promotions.catalog import PromotionCatalog
from storefront.promotions.pricing import PricingCalculator
from storefront.reviews.management import ReviewService
from storefront.reviews.rating import RatingRecalculator


class Storefront:
    def __init__(
        self,
        domain: Domain,
        notifier: OrderNotifier | None = None,
        recipient_for=None,
        clock=None,
    ) -> None:
        self.store = LedgerStore(domain)
        self.reservations = StockReservationEngine(self.store)
        self.pricing = PricingCalculator(self.store, clock) if clock else PricingCalculator(self.store)
        self.promotions = PromotionCatalog(self.store)
        self.carts = CartService(self.store, self.pricing, self.promotions)
        self.ratings = RatingRecalculator(self.store)
        self.reviews = ReviewService(self.store, self.ratings)

        self._owns_notifier = notifier is None
        if notifier is None:
            notifier = QueuedNotifier(EmailOrderNotifier(FakeEmailAdapter(), recipient_for or (lambda user_id: None)))
        self.notifier = notifier

        self.orders = OrderLifecycleCoordinator(
            self.store,
            self.reservations,
            self.pricing,
            self.notifier,
            carts=self.carts,
        )

    def close(self) -> None:
        """Stop the default notifier's worker threads. An injected notifier is left alone."""
        if self._owns_notifier:
            self.notifier.shutdown()

    # Operations exposed to transports
    def create_order(self, user_id, request):
        return self.orders.create_order(user_id, request)

    def checkout(self, user_id, request=None):
        return self.orders.checkout(user_id, request)

    def mark_paid(self, order_id, payment_result=None):
        return self.orders.mark_paid(order_id, payment_result)

    def mark_delivered(self, order_id):
        return self.orders.mark_delivered(order_id)

    def delete_order(self, order_id):
        return self.orders.delete_order(order_id)

    def all_orders(self, principal):
        return self.orders.all_orders(principal)

    def add_cart_item(self, user_id, request):
        return self.carts.add_cart_item(user_id, request)

    def remove_cart_item(self, user_id, product_id):
        return self.carts.remove_cart_item(user_id, product_id)

    def clear_cart(self, user_id):
        return self.carts.clear_cart(user_id)

    def create_review(self, product_id, user_id, draft):
        return self.reviews.create_review(product_id, user_id, draft)

    def update_review(self, review_id, principal, changes):
        return self.reviews.update_review(review_id, principal, changes)

    def delete_review(self, review_id, principal):
        return self.reviews.delete_review(review_id, principal)
