"""Domain events for the Review aggregate.

All events are versioned, immutable facts representing state changes.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from reviews.domain import reviews


@reviews.event(part_of="Review")
class ReviewSubmitted:
    """A customer submitted a new product review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(required=True)
    is_verified_purchase = String(required=True)  # "True"/"False"
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewModerated:
    """An admin approved, rejected or flagged the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    rating = Integer(required=True)
    moderator_id = Identifier(required=True)
    note = Text()
    revision = Integer(required=True)
    moderated_at = DateTime(required=True)


@reviews.event(part_of="Review")
class AdminReplyAdded:
    """An admin replied to the review."""

    __version__ = 1

    review_id = Identifier(required=True)
    reply_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    admin_role = String(required=True)
    message = Text(required=True)
    sequence = Integer(required=True)
    replied_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewMarkedHelpful:
    """A shopper marked the review as helpful."""

    __version__ = 1

    review_id = Identifier(required=True)
    helpful_count = Integer(required=True)
    marked_at = DateTime(required=True)


@reviews.event(part_of="Review")
class ReviewReported:
    """A shopper reported the review to the moderators."""

    __version__ = 1

    review_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = String(required=True)
    report_count = Integer(required=True)
    reported_at = DateTime(required=True)
