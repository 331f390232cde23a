"""Review aggregate: one customer's rating and comment on one product."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, Text

from storefront.domain import storefront
from storefront.reviews.events import ReviewSubmitted


@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text()
    created_at = DateTime()

    @classmethod
    def submit(cls, product_id, user_id, rating, comment=None):
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            comment=(comment or "").strip() or None,
            created_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                rating=rating,
                submitted_at=now,
            )
        )
        return review
