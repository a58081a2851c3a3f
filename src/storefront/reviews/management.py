"""Review management — create, edit and delete reviews.

Every change is followed by a rating recalculation for the product, run after
the review write has committed.
"""

import structlog

from storefront.auth import Principal, ensure_owner_or_admin
from storefront.catalogue.product import Product
from storefront.errors import DuplicateReview, NotFound, ProductNotFound
from storefront.ledger import LedgerStore
from storefront.reviews.rating import RatingRecalculator
from storefront.reviews.review import Review
from storefront.schemas import ReviewChanges, ReviewDraft, parse

logger = structlog.get_logger(__name__)


class ReviewService:
    def __init__(self, store: LedgerStore, recalculator: RatingRecalculator) -> None:
        self._store = store
        self._recalculator = recalculator

    def _require_product(self, product_id) -> None:
        try:
            self._store.get(Product, product_id)
        except NotFound as exc:
            raise ProductNotFound(product_id) from exc

    def create_review(self, product_id, user_id, draft) -> Review:
        """Review a product. Fails with DuplicateReview on a second review by the same user."""
        draft = parse(ReviewDraft, draft)
        self._require_product(product_id)

        # Serialize creation per (product, user) so the existence check holds
        with self._store.exclusive(Review, f"{product_id}:{user_id}"):
            if self._store.find_one(Review, product_id=str(product_id), user_id=str(user_id)) is not None:
                logger.warning("Duplicate review rejected", product_id=str(product_id), user_id=str(user_id))
                raise DuplicateReview(product_id, user_id)

            review = self._store.add(
                Review.write(
                    product_id=str(product_id),
                    user_id=str(user_id),
                    rating=draft.rating,
                    comment=draft.comment,
                )
            )

        logger.info("Review created", review_id=str(review.id), product_id=str(product_id), rating=review.rating)
        self._recalculator.recalculate(product_id)
        return review

    def update_review(self, review_id, principal: Principal, changes) -> Review:
        changes = parse(ReviewChanges, changes)
        review = self._store.get(Review, review_id)
        ensure_owner_or_admin(principal, review.user_id, "update this review")

        review = self._store.conditional_update(
            Review,
            review_id,
            lambda r: r.edit(rating=changes.rating, comment=changes.comment),
        )
        logger.info("Review updated", review_id=str(review_id), rating=review.rating)
        self._recalculator.recalculate(review.product_id)
        return review

    def delete_review(self, review_id, principal: Principal) -> None:
        review = self._store.get(Review, review_id)
        ensure_owner_or_admin(principal, review.user_id, "delete this review")

        review = self._store.conditional_update(Review, review_id, lambda r: r.mark_deleted())
        self._store.remove(review)
        logger.info("Review deleted", review_id=str(review_id), product_id=str(review.product_id))

        try:
            self._recalculator.recalculate(review.product_id)
        except ProductNotFound:
            logger.warning("Reviewed product no longer exists", product_id=str(review.product_id))

    def reviews_for_product(self, product_id) -> list[Review]:
        self._require_product(product_id)
        reviews = self._store.find(Review, product_id=str(product_id))
        return sorted(reviews, key=lambda r: r.created_at)
