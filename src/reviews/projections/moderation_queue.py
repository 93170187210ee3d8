"""ModerationQueue — reviews awaiting a moderator, with product names."""

from datetime import datetime

from pydantic import BaseModel


class ModerationQueueEntry(BaseModel):
    review_id: str
    product_id: str
    product_name: str
    user_name: str | None = None
    rating: int
    title: str
    comment: str
    status: str
    is_verified_purchase: bool = False
    report_count: int = 0
    reply_count: int = 0
    created_at: datetime


def build_queue(reviews, catalog=None) -> list[ModerationQueueEntry]:
    """Pair each review with its product's display name.

    Falls back to the product id when there is no catalog or the product
    is unknown to it.
    """
    entries = []
    for review in reviews:
        name = catalog.product_name(review.product_id) if catalog is not None else None
        entries.append(
            ModerationQueueEntry(
                review_id=review.id,
                product_id=review.product_id,
                product_name=name or review.product_id,
                user_name=review.user_name,
                rating=review.rating,
                title=review.title,
                comment=review.comment,
                status=review.status,
                is_verified_purchase=review.is_verified_purchase,
                report_count=len(review.flags),
                reply_count=len(review.admin_replies),
                created_at=review.created_at,
            )
        )
    return entries
