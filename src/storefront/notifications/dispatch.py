"""Background dispatch for order notifications."""

from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from storefront.notifications.port import OrderConfirmation, OrderNotifier

logger = structlog.get_logger(__name__)


class QueuedNotifier(OrderNotifier):
    """Hands each notification to a worker thread and returns at once.

    Failures in the wrapped notifier are logged, never raised to the caller.
    """

    def __init__(self, notifier: OrderNotifier, max_workers: int = 2) -> None:
        self._notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notifier")

    def order_placed(self, confirmation: OrderConfirmation) -> Future:
        future = self._executor.submit(self._notifier.order_placed, confirmation)
        future.add_done_callback(lambda f: self._report(f, confirmation))
        return future

    @staticmethod
    def _report(future: Future, confirmation: OrderConfirmation) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Order notification failed",
                order_id=confirmation.order_id,
                error=str(exc),
            )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
