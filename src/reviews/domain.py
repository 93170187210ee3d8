"""Reviews bounded context — product reviews, moderation and ratings.

Handles the review lifecycle (submission, moderation, admin replies,
helpfulness, reports) and the admin users allowed to moderate. Shopper
facing reads only ever see approved reviews.
"""

from protean.domain import Domain

from reviews.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

reviews = Domain(name="reviews")
