"""ProductRating — rating summary per product, from approved reviews only.

Recomputed from the cached reviews on every call. At higher review volumes
keep the distribution per product instead and adjust it whenever a review
moves into or out of APPROVED.
"""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel

from reviews.review.review import MAX_RATING, MIN_RATING, ReviewStatus

_STAR_VALUES = range(MAX_RATING, MIN_RATING - 1, -1)


class ProductRating(BaseModel):
    product_id: str
    average_rating: float = 0.0
    total_reviews: int = 0
    rating_distribution: dict[int, int]


def _default_distribution():
    return {star: 0 for star in _STAR_VALUES}


def round_half_up(value, places=0):
    """Round the way shoppers expect (2.5 → 3), not banker's rounding."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def summarize(reviews, product_id) -> ProductRating:
    """Summarize the approved reviews of ``product_id``."""
    approved = [r for r in reviews if r.product_id == product_id and r.status == ReviewStatus.APPROVED.value]

    if not approved:
        return ProductRating(product_id=product_id, rating_distribution=_default_distribution())

    distribution = _default_distribution()
    for review in approved:
        star = int(round_half_up(review.rating))
        if star in distribution:
            distribution[star] += 1

    average = sum(r.rating for r in approved) / len(approved)

    return ProductRating(
        product_id=product_id,
        average_rating=float(round_half_up(average, places=1)),
        total_reviews=len(approved),
        rating_distribution=distribution,
    )
