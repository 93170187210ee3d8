"""SubmitReview — submit a new product review.

The review is created in PENDING status and stays invisible to shoppers
until a moderator approves it.
"""

import json

from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    user_name = String(max_length=100)
    rating = Integer(required=True)
    title = String(required=True, max_length=100)
    comment = Text(required=True)
    images = Text()  # JSON array of image URLs
    size = String(max_length=50)
    color = String(max_length=50)
    is_verified_purchase = Boolean(default=False)


@reviews.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Review)

        images = json.loads(command.images) if command.images else None

        review = Review.submit(
            product_id=command.product_id,
            user_id=command.user_id,
            user_name=command.user_name,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            images=images,
            size=command.size,
            color=command.color,
            is_verified_purchase=bool(command.is_verified_purchase),
        )
        repo.add(review)
        return str(review.id)
