"""Tests for background notification dispatch."""

import threading

import pytest

from storefront.domain import storefront
from storefront.notifications import EmailOrderNotifier, QueuedNotifier
from storefront.notifications.fake_email import FakeEmailAdapter
from storefront.notifications.port import OrderConfirmation, OrderNotifier
from storefront.services import Storefront


class _Blocking(OrderNotifier):
    def __init__(self):
        self.release = threading.Event()
        self.done = threading.Event()

    def order_placed(self, confirmation):
        self.release.wait(timeout=5)
        self.done.set()


class _Broken(OrderNotifier):
    def order_placed(self, confirmation):
        raise ConnectionError("relay down")


def _confirmation():
    return OrderConfirmation(order_id="o-1", user_id="u-1", item_count=1, items_price=1.0, discount=0.0, total_price=1.0)


class TestQueuedNotifier:
    def test_returns_before_delivery(self):
        blocking = _Blocking()
        queued = QueuedNotifier(blocking)

        future = queued.order_placed(_confirmation())

        assert not future.done()
        blocking.release.set()
        future.result(timeout=5)
        assert blocking.done.is_set()
        queued.shutdown()

    def test_failures_stay_in_the_worker(self):
        queued = QueuedNotifier(_Broken())
        future = queued.order_placed(_confirmation())
        queued.shutdown()
        assert isinstance(future.exception(), ConnectionError)


class TestDefaultWiring:
    def test_order_confirmation_is_emailed_in_background(self, make_product):
        email = FakeEmailAdapter()
        queued = QueuedNotifier(EmailOrderNotifier(email, lambda user_id: "buyer@example.com"))
        shop = Storefront(storefront, notifier=queued)
        product = make_product(stock=3)

        shop.create_order("buyer", {"line_items": [{"product_id": str(product.id), "quantity": 1}]})
        queued.shutdown(wait=True)

        assert [m["to"] for m in email.outbox] == ["buyer@example.com"]

    def test_close_stops_the_default_notifier(self):
        shop = Storefront(storefront)
        shop.close()

        with pytest.raises(RuntimeError):
            shop.notifier.order_placed(_confirmation())

    def test_close_leaves_an_injected_notifier_running(self):
        blocking = _Blocking()
        queued = QueuedNotifier(blocking)
        shop = Storefront(storefront, notifier=queued)
        shop.close()

        future = queued.order_placed(_confirmation())
        blocking.release.set()
        future.result(timeout=5)
        queued.shutdown()
