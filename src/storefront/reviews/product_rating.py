"""ProductRating: running average of review ratings per product."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.reviews.events import ReviewSubmitted
from storefront.reviews.review import Review


@storefront.projection
class ProductRating:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(default=0.0)
    total_reviews = Integer(default=0)
    rating_sum = Integer(default=0)
    updated_at = DateTime()


@storefront.projector(projector_for=ProductRating, aggregates=[Review])
class ProductRatingProjector:
    @on(ReviewSubmitted)
    def on_review_submitted(self, event):
        repo = current_domain.repository_for(ProductRating)

        try:
            rating = repo.get(event.product_id)
        except ObjectNotFoundError:
            rating = ProductRating(product_id=event.product_id, total_reviews=0, rating_sum=0)

        rating.total_reviews = rating.total_reviews + 1
        rating.rating_sum = rating.rating_sum + event.rating
        rating.average_rating = round(rating.rating_sum / rating.total_reviews, 2)
        rating.updated_at = event.submitted_at

        repo.add(rating)
