"""Aggregate Recalculator — keeps a product's rating in line with its reviews.

Each run is a full scan of the product's persisted reviews, taken while the
product is held for update. Runs are idempotent: whichever commits last has
seen every review committed before it, so concurrent review writes converge
on the right figures.
"""

import structlog

from storefront.catalogue.product import Product
from storefront.errors import NotFound, ProductNotFound
from storefront.ledger import LedgerStore
from storefront.reviews.review import Review

logger = structlog.get_logger(__name__)


def review_stats(ratings) -> tuple[int, float]:
    """(count, mean) of a collection of ratings; the mean of nothing is 0."""
    ratings = list(ratings)
    if not ratings:
        return 0, 0.0
    return len(ratings), sum(ratings) / len(ratings)


class RatingRecalculator:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def recalculate(self, product_id) -> Product:
        """Recompute ``num_reviews`` and ``rating`` from the product's reviews."""

        def refresh(product):
            reviews = self._store.find(Review, product_id=str(product_id))
            num_reviews, rating = review_stats(review.rating for review in reviews)
            product.apply_review_stats(num_reviews, rating)

        try:
            product = self._store.conditional_update(Product, product_id, refresh)
        except NotFound as exc:
            raise ProductNotFound(product_id) from exc

        logger.info(
            "Product rating recalculated",
            product_id=str(product_id),
            rating=product.rating,
            num_reviews=product.num_reviews,
        )
        return product
