"""In-memory review collection — a document store for tests and development.

Behaves like the hosted document database the storefront talks to: it
assigns ids and creation timestamps, applies array-union appends and
increments, and pushes a fresh snapshot to every subscriber after each write.
Failure can be switched on to exercise error paths.
"""

import copy
from datetime import UTC, datetime
from uuid import uuid4

from reviews.collection.port import ReviewCollectionPort, SnapshotListener
from reviews.domain import logger
from reviews.errors import PersistenceError, RevisionConflictError
from reviews.review.review import target_status


class InMemoryReviewCollection(ReviewCollectionPort):
    """In-memory collection that always succeeds by default."""

    def __init__(self, documents=None):
        self._documents: dict[str, dict] = {}
        self._listeners: list[SnapshotListener] = []
        self.should_succeed = True
        self.failure_reason = "Review collection unavailable"
        self.write_count = 0

        for document in documents or []:
            self.seed(document)

    def configure(self, should_succeed: bool = True, failure_reason: str = "Review collection unavailable"):
        """Configure the collection behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def seed(self, document: dict) -> str:
        """Store a document as written by another client. Not counted as a write."""
        seeded = copy.deepcopy(document)
        seeded.setdefault("id", uuid4().hex)
        seeded.setdefault("created_at", datetime.now(UTC))
        seeded.setdefault("revision", 0)
        seeded.setdefault("admin_replies", [])
        seeded.setdefault("flags", [])
        self._documents[seeded["id"]] = seeded

        self._notify()
        return seeded["id"]

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
        documents = sorted(self._documents.values(), key=lambda d: d["created_at"], reverse=True)
        return copy.deepcopy(documents)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def add_review(self, document: dict) -> str:
        self._check_available()

        review_id = uuid4().hex
        stored = copy.deepcopy(document)
        stored.update(
            {
                "id": review_id,
                "created_at": datetime.now(UTC),
                "revision": 0,
                "admin_replies": list(stored.get("admin_replies") or []),
                "flags": list(stored.get("flags") or []),
            }
        )
        self._documents[review_id] = stored

        self._committed()
        return review_id

    def set_moderation(self, review_id, action, moderated_by, note=None, expected_revision=None) -> dict:
        self._check_available()
        document = self._get(review_id)

        if expected_revision is not None and expected_revision != document["revision"]:
            raise RevisionConflictError(review_id, expected_revision, document["revision"])

        fields = {
            "status": target_status(action).value,
            "moderated_by": moderated_by,
            "moderated_at": datetime.now(UTC),
            "moderation_note": note or document.get("moderation_note"),
            "revision": document["revision"] + 1,
        }
        document.update(fields)

        self._committed()
        return dict(fields)

    def append_reply(self, review_id, reply) -> None:
        self._check_available()
        document = self._get(review_id)

        replies = document.setdefault("admin_replies", [])
        if any(existing["id"] == reply["id"] for existing in replies):
            return

        stored = copy.deepcopy(reply)
        stored["sequence"] = len(replies) + 1
        replies.append(stored)

        self._committed()

    def append_flag(self, review_id, flag) -> None:
        self._check_available()
        document = self._get(review_id)

        stored = copy.deepcopy(flag)
        stored.setdefault("created_at", datetime.now(UTC))
        document.setdefault("flags", []).append(stored)

        self._committed()

    def increment_helpful(self, review_id) -> int:
        self._check_available()
        document = self._get(review_id)

        document["helpful_count"] = document.get("helpful_count", 0) + 1

        self._committed()
        return document["helpful_count"]

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _check_available(self):
        if not self.should_succeed:
            raise PersistenceError(self.failure_reason)

    def _get(self, review_id) -> dict:
        try:
            return self._documents[review_id]
        except KeyError:
            raise PersistenceError(f"Review {review_id} not found") from None

    def _committed(self):
        self.write_count += 1
        self._notify()

    def _notify(self):
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(copy.deepcopy(snapshot))
            except Exception:
                logger.exception("Review snapshot listener failed")
