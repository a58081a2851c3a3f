"""Review aggregate — one customer's rating of one product.

A user reviews a product at most once. That uniqueness spans Review records,
so it is enforced by ``ReviewService`` at creation rather than here.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, Text

from storefront.domain import storefront
from storefront.reviews.events import ReviewCreated, ReviewDeleted, ReviewUpdated


@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(default="")
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def write(cls, product_id, user_id, rating, comment=""):
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            comment=comment or "",
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewCreated(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                rating=rating,
                created_at=now,
            )
        )
        return review

    def edit(self, rating=None, comment=None):
        """Change the rating and/or comment. ``None`` leaves a field as it is."""
        previous_rating = self.rating
        if rating is not None:
            self.rating = rating
        if comment is not None:
            self.comment = comment

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ReviewUpdated(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating,
                previous_rating=previous_rating,
                updated_at=now,
            )
        )

    def mark_deleted(self):
        self.raise_(
            ReviewDeleted(
                review_id=str(self.id),
                product_id=str(self.product_id),
                user_id=str(self.user_id),
                deleted_at=datetime.now(UTC),
            )
        )
