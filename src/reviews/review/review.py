"""Review aggregate (CQRS) — the core of the Reviews domain.

The Review aggregate manages the lifecycle of a customer's product review:
submission, moderation, admin replies, helpfulness and reports.

State Machine (4 states):
    PENDING → APPROVED | REJECTED | FLAGGED
    APPROVED | REJECTED | FLAGGED → APPROVED | REJECTED | FLAGGED

PENDING is only ever the initial state. Moderating a review again is legal,
including repeating the same action. Every moderation bumps ``revision`` so
that concurrent moderators can be detected with a compare-and-swap.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from reviews.domain import reviews
from reviews.review.events import (
    AdminReplyAdded,
    ReviewMarkedHelpful,
    ReviewModerated,
    ReviewReported,
    ReviewSubmitted,
)

MIN_RATING = 1
MAX_RATING = 5
MAX_TITLE_LENGTH = 100
MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 1000
MAX_IMAGES = 3


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class ModerationAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"
    FLAG = "flag"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_MODERATED_STATES = {ReviewStatus.APPROVED, ReviewStatus.REJECTED, ReviewStatus.FLAGGED}

_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: _MODERATED_STATES,
    ReviewStatus.APPROVED: _MODERATED_STATES,
    ReviewStatus.REJECTED: _MODERATED_STATES,
    ReviewStatus.FLAGGED: _MODERATED_STATES,
}

_ACTION_TARGETS = {
    ModerationAction.APPROVE: ReviewStatus.APPROVED,
    ModerationAction.REJECT: ReviewStatus.REJECTED,
    ModerationAction.FLAG: ReviewStatus.FLAGGED,
}


def target_status(action) -> ReviewStatus:
    """Return the status a moderation action moves a review to."""
    try:
        return _ACTION_TARGETS[ModerationAction(action)]
    except ValueError:
        raise ValidationError({"action": [f"Unknown moderation action: {action}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@reviews.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < MIN_RATING or self.score > MAX_RATING):
            raise ValidationError({"score": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class ReviewImage:
    """A photo attached to a review."""

    url = String(required=True, max_length=500)
    display_order = Integer(default=0)


@reviews.entity(part_of="Review")
class AdminReply:
    """A staff response attached to a review, visible to shoppers."""

    reply_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    admin_name = String(required=True, max_length=100)
    admin_role = String(required=True, max_length=50)
    message = Text(required=True)
    sequence = Integer(required=True)
    created_at = DateTime(required=True)


@reviews.entity(part_of="Review")
class ReviewFlag:
    """A shopper's report that a review breaks the rules."""

    reason = String(required=True, max_length=255)
    reported_by = Identifier(required=True)
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    """A customer's review of a product.

    Only approved reviews are shown to shoppers or counted in ratings.
    Admin replies and flags are append-only.
    """

    # Core identifiers
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    user_name = String(max_length=100)

    # Content
    rating = ValueObject(Rating, required=True)
    title = String(required=True, max_length=MAX_TITLE_LENGTH)
    comment = Text(required=True)
    size = String(max_length=50)
    color = String(max_length=50)

    # Media
    images = HasMany(ReviewImage)

    # Verification
    is_verified_purchase = Boolean(default=False)

    # Helpfulness
    helpful_count = Integer(default=0)

    # Moderation
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    moderated_by = Identifier()
    moderated_at = DateTime()
    moderation_note = Text()
    revision = Integer(default=0)

    # Staff and shopper annotations
    admin_replies = HasMany(AdminReply)
    flags = HasMany(ReviewFlag)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

    @invariant.post
    def comment_length_within_bounds(self):
        if self.comment is None:
            return
        length = len(self.comment.strip())
        if length < MIN_COMMENT_LENGTH:
            raise ValidationError({"comment": [f"Review must be at least {MIN_COMMENT_LENGTH} characters long"]})
        if length > MAX_COMMENT_LENGTH:
            raise ValidationError({"comment": [f"Review cannot be longer than {MAX_COMMENT_LENGTH} characters"]})

    @invariant.post
    def title_must_not_be_empty(self):
        if self.title is not None and len(self.title.strip()) == 0:
            raise ValidationError({"title": ["Review title cannot be empty"]})

    @invariant.post
    def helpful_count_cannot_be_negative(self):
        if self.helpful_count is not None and self.helpful_count < 0:
            raise ValidationError({"helpful_count": ["Helpful count cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        user_id,
        rating,
        title,
        comment,
        user_name=None,
        images=None,
        size=None,
        color=None,
        is_verified_purchase=False,
    ):
        """Submit a new review. It stays hidden from shoppers until approved."""
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            user_id=user_id,
            user_name=user_name,
            rating=Rating(score=rating),
            title=title.strip() if title else title,
            comment=comment.strip() if comment else comment,
            size=size,
            color=color,
            is_verified_purchase=is_verified_purchase,
            status=ReviewStatus.PENDING.value,
            helpful_count=0,
            revision=0,
            created_at=now,
            updated_at=now,
        )

        if images:
            for i, url in enumerate(images):
                review.add_images(ReviewImage(url=url, display_order=i))

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                rating=rating,
                title=review.title,
                is_verified_purchase=str(is_verified_purchase),
                image_count=len(images) if images else 0,
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        current = ReviewStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def moderate(self, action, moderator_id, note=None):
        """Apply a moderation action (approve, reject or flag).

        A missing note keeps whatever note an earlier moderation left.
        """
        target = target_status(action)
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)

        with atomic_change(self):
            self.status = target.value
            self.moderated_by = moderator_id
            self.moderated_at = now
            if note:
                self.moderation_note = note
            self.revision = (self.revision or 0) + 1
            self.updated_at = now

        self.raise_(
            ReviewModerated(
                review_id=str(self.id),
                product_id=str(self.product_id),
                previous_status=previous,
                status=self.status,
                rating=self.rating.score,
                moderator_id=str(moderator_id),
                note=note,
                revision=self.revision,
                moderated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Admin replies
    # -------------------------------------------------------------------
    def add_admin_reply(self, reply_id, admin_id, admin_name, admin_role, message, created_at=None):
        """Append a staff reply. Allowed in every status.

        Appending the same ``reply_id`` twice keeps the first copy.
        """
        existing = next((r for r in self.admin_replies if str(r.reply_id) == str(reply_id)), None)
        if existing:
            return existing

        if not message or not message.strip():
            raise ValidationError({"message": ["Reply message cannot be empty"]})

        now = datetime.now(UTC)
        reply = AdminReply(
            reply_id=reply_id,
            admin_id=admin_id,
            admin_name=admin_name,
            admin_role=admin_role,
            message=message,
            sequence=len(self.admin_replies) + 1,
            created_at=created_at or now,
        )
        self.add_admin_replies(reply)
        self.updated_at = now

        self.raise_(
            AdminReplyAdded(
                review_id=str(self.id),
                reply_id=str(reply_id),
                admin_id=str(admin_id),
                admin_role=admin_role,
                message=message,
                sequence=reply.sequence,
                replied_at=reply.created_at,
            )
        )

        return reply

    # -------------------------------------------------------------------
    # Helpfulness
    # -------------------------------------------------------------------
    def mark_helpful(self):
        """Count one more shopper who found the review helpful."""
        now = datetime.now(UTC)

        with atomic_change(self):
            self.helpful_count = (self.helpful_count or 0) + 1
            self.updated_at = now

        self.raise_(
            ReviewMarkedHelpful(
                review_id=str(self.id),
                helpful_count=self.helpful_count,
                marked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------
    def report(self, reported_by, reason):
        """Record a shopper's report. The review's status is left alone."""
        if str(reported_by) == str(self.user_id):
            raise ValidationError({"report": ["Cannot report your own review"]})

        now = datetime.now(UTC)
        self.add_flags(ReviewFlag(reason=reason, reported_by=reported_by, created_at=now))
        self.updated_at = now

        self.raise_(
            ReviewReported(
                review_id=str(self.id),
                reporter_id=str(reported_by),
                reason=reason,
                report_count=len(self.flags),
                reported_at=now,
            )
        )
