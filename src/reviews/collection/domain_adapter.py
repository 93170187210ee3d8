"""Review collection backed by the Protean ``reviews`` domain.

Writes are processed as domain commands against the Review aggregate, so the
aggregate's invariants and state machine guard every change. After each
committed command the adapter reads the repository back and pushes the new
snapshot to its subscribers.
"""

import json

from protean.exceptions import ObjectNotFoundError, ValidationError

from reviews.collection.port import ReviewCollectionPort, SnapshotListener
from reviews.domain import logger
from reviews.errors import PersistenceError
from reviews.review.moderation import ModerateReview
from reviews.review.reply import AddAdminReply
from reviews.review.reporting import ReportReview
from reviews.review.review import Review
from reviews.review.submission import SubmitReview
from reviews.review.voting import MarkReviewHelpful

DEFAULT_SNAPSHOT_LIMIT = 1000


def review_document(review) -> dict:
    """Flatten a Review aggregate into a collection document."""
    return {
        "id": str(review.id),
        "product_id": str(review.product_id),
        "user_id": str(review.user_id),
        "user_name": review.user_name,
        "rating": review.rating.score,
        "title": review.title,
        "comment": review.comment,
        "images": [image.url for image in sorted(review.images, key=lambda i: i.display_order or 0)],
        "size": review.size,
        "color": review.color,
        "is_verified_purchase": bool(review.is_verified_purchase),
        "helpful_count": review.helpful_count or 0,
        "status": review.status,
        "moderated_by": str(review.moderated_by) if review.moderated_by else None,
        "moderated_at": review.moderated_at,
        "moderation_note": review.moderation_note,
        "revision": review.revision or 0,
        "admin_replies": [
            {
                "id": str(reply.reply_id),
                "admin_id": str(reply.admin_id),
                "admin_name": reply.admin_name,
                "admin_role": reply.admin_role,
                "message": reply.message,
                "sequence": reply.sequence,
                "created_at": reply.created_at,
            }
            for reply in sorted(review.admin_replies, key=lambda r: r.sequence)
        ],
        "flags": [
            {
                "reason": flag.reason,
                "reported_by": str(flag.reported_by),
                "created_at": flag.created_at,
            }
            for flag in sorted(review.flags, key=lambda f: f.created_at)
        ],
        "created_at": review.created_at,
    }


class DomainReviewCollection(ReviewCollectionPort):
    """Collection adapter that routes writes through domain commands."""

    def __init__(self, domain, snapshot_limit: int = DEFAULT_SNAPSHOT_LIMIT):
        self._domain = domain
        self._snapshot_limit = snapshot_limit
        self._listeners: list[SnapshotListener] = []

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def subscribe(self, on_change: SnapshotListener):
        self._listeners.append(on_change)
        on_change(self.snapshot())

        def unsubscribe():
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    def snapshot(self) -> list[dict]:
        with self._domain.domain_context():
            repo = self._domain.repository_for(Review)
            stored = repo._dao.query.order_by("-created_at").limit(self._snapshot_limit).all().items
            documents = [review_document(repo.get(item.id)) for item in stored]
        return sorted(documents, key=lambda d: d["created_at"], reverse=True)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def add_review(self, document: dict) -> str:
        review_id = self._process(
            SubmitReview,
            product_id=document["product_id"],
            user_id=document["user_id"],
            user_name=document.get("user_name"),
            rating=document["rating"],
            title=document["title"],
            comment=document["comment"],
            images=json.dumps(document["images"]) if document.get("images") else None,
            size=document.get("size"),
            color=document.get("color"),
            is_verified_purchase=bool(document.get("is_verified_purchase")),
        )
        self._publish()
        return review_id

    def set_moderation(self, review_id, action, moderated_by, note=None, expected_revision=None) -> dict:
        self._process(
            ModerateReview,
            review_id=review_id,
            moderator_id=moderated_by,
            action=action,
            note=note,
            expected_revision=expected_revision,
        )

        with self._domain.domain_context():
            review = self._domain.repository_for(Review).get(review_id)
            fields = {
                "status": review.status,
                "moderated_by": str(review.moderated_by),
                "moderated_at": review.moderated_at,
                "moderation_note": review.moderation_note,
                "revision": review.revision,
            }

        self._publish()
        return fields

    def append_reply(self, review_id, reply) -> None:
        self._process(
            AddAdminReply,
            review_id=review_id,
            reply_id=reply["id"],
            admin_id=reply["admin_id"],
            admin_name=reply["admin_name"],
            admin_role=reply["admin_role"],
            message=reply["message"],
            created_at=reply.get("created_at"),
        )
        self._publish()

    def append_flag(self, review_id, flag) -> None:
        self._process(
            ReportReview,
            review_id=review_id,
            reported_by=flag["reported_by"],
            reason=flag["reason"],
        )
        self._publish()

    def increment_helpful(self, review_id) -> int:
        helpful_count = self._process(MarkReviewHelpful, review_id=review_id)
        self._publish()
        return helpful_count

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _process(self, command_cls, **fields):
        """Build and process a command, translating domain failures."""
        with self._domain.domain_context():
            try:
                return self._domain.process(command_cls(**fields), asynchronous=False)
            except ObjectNotFoundError as exc:
                raise PersistenceError(f"Review not found: {exc}") from exc
            except ValidationError as exc:
                raise PersistenceError(f"Review write rejected: {exc.messages}") from exc

    def _publish(self):
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Review snapshot listener failed")
