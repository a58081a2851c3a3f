"""Stock Reservation Engine — atomic stock decrement and restore per product.

``reserve`` checks and decrements in one conditional update on the Ledger
Store, so concurrent reservations against one product serialize and the sum
of granted quantities never exceeds the stock each one was granted against.
Insufficient stock is a permanent failure for the request and is not retried.
"""

from dataclasses import dataclass

import structlog

from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock, NotFound, ProductNotFound
from storefront.ledger import LedgerStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    """A granted stock decrement and the price the line is charged at."""

    product_id: str
    quantity: int
    unit_price: float


class StockReservationEngine:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def reserve(self, product_id, quantity: int) -> Reservation:
        """Decrement stock by ``quantity``.

        Raises NotFound for an unknown product, InsufficientStock when stock
        is below ``quantity``, ValidationFailed for a quantity below 1.
        """
        snapshot = {}

        def take(product):
            snapshot["unit_price"] = product.reserve(quantity)

        try:
            self._store.conditional_update(Product, product_id, take)
        except NotFound as exc:
            raise ProductNotFound(product_id) from exc
        except InsufficientStock as exc:
            logger.warning(
                "Stock reservation rejected",
                product_id=str(product_id),
                requested=exc.requested,
                available=exc.available,
            )
            raise

        logger.info("Stock reserved", product_id=str(product_id), quantity=quantity)
        return Reservation(
            product_id=str(product_id),
            quantity=quantity,
            unit_price=snapshot["unit_price"],
        )

    def release(self, product_id, quantity: int) -> None:
        """Return ``quantity`` units to stock."""
        try:
            self._store.conditional_update(Product, product_id, lambda product: product.release(quantity))
        except NotFound as exc:
            raise ProductNotFound(product_id) from exc
        logger.info("Stock released", product_id=str(product_id), quantity=quantity)
