"""ReviewStore — cached reviews kept in sync with the review collection.

The store subscribes to a collection and replaces its cache with every
snapshot the collection pushes. Mutations go to the collection first; only
after the collection confirms them is the cached record patched, so a
failed write never shows up locally. Reads are projections over the cache.

Failures are terminal at this boundary: they are logged and reported as
False/None, never retried. Invalid review drafts raise ValidationError
before anything is written.
"""

import threading
from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError

from reviews.admin.admin_user import Action, Resource, require_permission
from reviews.domain import logger
from reviews.errors import AuthorizationError, PersistenceError, RevisionConflictError
from reviews.projections.moderation_queue import build_queue
from reviews.projections.moderation_stats import compute_stats
from reviews.projections.product_rating import summarize
from reviews.projections.review_listing import ReviewFilter, SortOrder, browse
from reviews.review.review import ModerationAction, ReviewStatus, target_status
from reviews.store.records import AdminReplyRecord, ReviewFlagRecord, ReviewRecord

_MODERATION_QUEUE_STATES = (ReviewStatus.PENDING.value, ReviewStatus.FLAGGED.value)


class ReviewStore:
    """Local review cache with moderation, reply and helpfulness operations.

    Call ``open()`` at startup and ``close()`` at shutdown, or use the store
    as a context manager.
    """

    def __init__(self, collection, catalog=None):
        self._collection = collection
        self._catalog = catalog
        self._reviews: list[ReviewRecord] = []
        self._lock = threading.Lock()
        self._unsubscribe = None

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def open(self):
        if self._unsubscribe is None:
            self._unsubscribe = self._collection.subscribe(self._on_snapshot)
        return self

    def close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc_info):
        self.close()

    def _on_snapshot(self, documents):
        records = [ReviewRecord.model_validate(document) for document in documents]
        with self._lock:
            self._reviews = records
        logger.debug("Review snapshot received", review_count=len(records))

    def _patch(self, review_id, update):
        """Replace the cached record with ``update`` applied. Returns the new record."""
        with self._lock:
            for index, record in enumerate(self._reviews):
                if record.id == review_id:
                    patched = update(record)
                    self._reviews[index] = patched
                    return patched
        return None

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def reviews(self) -> list[ReviewRecord]:
        with self._lock:
            return list(self._reviews)

    def get(self, review_id) -> ReviewRecord | None:
        return next((r for r in self.reviews if r.id == review_id), None)

    def reviews_for_product(self, product_id) -> list[ReviewRecord]:
        """Approved reviews of a product, newest first."""
        return [r for r in self.reviews if r.product_id == product_id and r.is_approved]

    def browse(self, product_id, filter_by=ReviewFilter.ALL, sort_by=SortOrder.NEWEST) -> list[ReviewRecord]:
        return browse(self.reviews_for_product(product_id), filter_by=filter_by, sort_by=sort_by)

    def reviews_for_moderation(self, status=None) -> list[ReviewRecord]:
        """Pending and flagged reviews, or exactly ``status`` when given."""
        if status is not None:
            try:
                status = ReviewStatus(status).value
            except ValueError:
                raise ValidationError({"status": [f"Unknown review status: {status}"]}) from None
            return [r for r in self.reviews if r.status == status]
        return [r for r in self.reviews if r.status in _MODERATION_QUEUE_STATES]

    def moderation_queue(self, status=None):
        return build_queue(self.reviews_for_moderation(status), self._catalog)

    def review_summary(self, product_id):
        return summarize(self.reviews, product_id)

    def stats(self):
        return compute_stats(self.reviews)

    # -------------------------------------------------------------------
    # Shopper writes
    # -------------------------------------------------------------------
    def submit(self, draft) -> bool:
        """Submit a review for moderation.

        Raises:
            ValidationError: the draft breaks a review rule. Nothing is written.
        """
        errors = draft.validation_errors()
        if errors:
            raise ValidationError(errors)

        try:
            review_id = self._collection.add_review(draft.to_document())
        except PersistenceError as exc:
            logger.error("Review submission failed", product_id=draft.product_id, error=str(exc))
            return False

        logger.info("Review submitted", review_id=review_id, product_id=draft.product_id)
        return True

    def mark_helpful(self, review_id) -> bool:
        try:
            helpful_count = self._collection.increment_helpful(review_id)
        except PersistenceError as exc:
            logger.error("Marking review helpful failed", review_id=review_id, error=str(exc))
            return False

        self._patch(review_id, lambda r: r.model_copy(update={"helpful_count": helpful_count}))
        return True

    def report(self, review_id, reason, reported_by) -> bool:
        """Record a shopper's report. Moderators decide whether to flag the review."""
        flag = ReviewFlagRecord(reason=reason, reported_by=reported_by, created_at=datetime.now(UTC))

        try:
            self._collection.append_flag(review_id, flag.model_dump())
        except PersistenceError as exc:
            logger.error("Reporting review failed", review_id=review_id, error=str(exc))
            return False

        logger.info("Review reported", review_id=review_id, reported_by=reported_by)
        return True

    # -------------------------------------------------------------------
    # Admin writes
    # -------------------------------------------------------------------
    def moderate(self, review_id, action, admin, note=None) -> bool:
        """Approve, reject or flag a review on behalf of ``admin``."""
        target = target_status(action)

        try:
            require_permission(admin, Resource.REVIEWS, Action.MODERATE)
        except AuthorizationError as exc:
            logger.warning("Review moderation refused", review_id=review_id, reason=str(exc))
            return False

        cached = self.get(review_id)
        expected_revision = cached.revision if cached is not None else None

        try:
            fields = self._collection.set_moderation(
                review_id,
                ModerationAction(action).value,
                str(admin.id),
                note=note,
                expected_revision=expected_revision,
            )
        except RevisionConflictError as exc:
            logger.warning(
                "Review was moderated concurrently",
                review_id=review_id,
                expected_revision=exc.expected,
                revision=exc.actual,
            )
            return False
        except PersistenceError as exc:
            logger.error("Review moderation failed", review_id=review_id, error=str(exc))
            return False

        self._patch(review_id, lambda r: r.model_copy(update=fields))
        logger.info("Review moderated", review_id=review_id, status=target.value, moderator_id=str(admin.id))
        return True

    def add_reply(self, review_id, admin, message) -> AdminReplyRecord | None:
        """Attach a staff reply. Returns the reply, or None when it was not saved.

        Raises:
            ValidationError: the message is blank. Nothing is written.
        """
        if not message or not message.strip():
            raise ValidationError({"message": ["Reply message cannot be empty"]})

        try:
            require_permission(admin, Resource.REVIEWS, Action.WRITE)
        except AuthorizationError as exc:
            logger.warning("Admin reply refused", review_id=review_id, reason=str(exc))
            return None

        reply = AdminReplyRecord(
            id=uuid4().hex[:12],
            admin_id=str(admin.id),
            admin_name=admin.name,
            admin_role=admin.role,
            message=message,
            created_at=datetime.now(UTC),
        )

        try:
            self._collection.append_reply(review_id, reply.model_dump())
        except PersistenceError as exc:
            logger.error("Admin reply failed", review_id=review_id, error=str(exc))
            return None

        def append(record):
            if any(existing.id == reply.id for existing in record.admin_replies):
                return record
            return record.model_copy(update={"admin_replies": [*record.admin_replies, reply]})

        patched = self._patch(review_id, append)
        logger.info("Admin reply added", review_id=review_id, admin_id=str(admin.id))
        if patched is None:
            return reply
        return next((r for r in patched.admin_replies if r.id == reply.id), reply)
