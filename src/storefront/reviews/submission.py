"""SubmitReview: a customer rates a product they can see in the catalogue.

One review per customer per product, enforced here because it spans
aggregate instances.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.reviews.review import Review
from storefront.shared.errors import ProductNotFound
from storefront.shared.queries import fetch_all


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text()


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        if current_domain.repository_for(Product).find_active(command.product_id) is None:
            raise ProductNotFound(command.product_id)

        repo = current_domain.repository_for(Review)
        existing = repo._dao.query.filter(
            user_id=str(command.user_id),
            product_id=str(command.product_id),
        ).all()
        if existing.items:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        review = Review.submit(
            product_id=command.product_id,
            user_id=command.user_id,
            rating=command.rating,
            comment=command.comment,
        )
        repo.add(review)
        return str(review.id)


def reviews_for_product(product_id) -> list[Review]:
    return fetch_all(Review, order_by="-created_at", product_id=str(product_id))


def review_view(review: Review) -> dict:
    return {
        "id": str(review.id),
        "product_id": str(review.product_id),
        "user_id": str(review.user_id),
        "rating": review.rating,
        "comment": review.comment,
        "created_at": review.created_at,
    }
