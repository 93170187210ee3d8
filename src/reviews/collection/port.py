"""Review collection port — the remote "reviews" document collection.

The review store programs against this interface; adapters are swapped via
configuration. Documents are plain dicts keyed like ``ReviewRecord``.

Subscribers receive the full snapshot (ordered newest first) as soon as they
subscribe and again after every committed write, whichever client made it.
Every failed read or write raises ``PersistenceError``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

SnapshotListener = Callable[[list[dict]], None]


class ReviewCollectionPort(ABC):
    """Abstract interface for review collection adapters."""

    @abstractmethod
    def subscribe(self, on_change: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener.

        Returns:
            A callable that removes the listener again.
        """
        ...

    @abstractmethod
    def snapshot(self) -> list[dict]:
        """Return every review document, newest first."""
        ...

    @abstractmethod
    def add_review(self, document: dict) -> str:
        """Persist a new review document.

        The collection assigns ``id``, ``created_at`` and ``revision``.

        Returns:
            The new review's id.
        """
        ...

    @abstractmethod
    def set_moderation(
        self,
        review_id: str,
        action: str,
        moderated_by: str,
        note: str | None = None,
        expected_revision: int | None = None,
    ) -> dict:
        """Apply a moderation action, compare-and-swap on ``expected_revision``.

        Returns:
            dict with keys: status, moderated_by, moderated_at, moderation_note, revision
        """
        ...

    @abstractmethod
    def append_reply(self, review_id: str, reply: dict) -> None:
        """Append an admin reply. A reply with an id already present is not added twice."""
        ...

    @abstractmethod
    def append_flag(self, review_id: str, flag: dict) -> None:
        """Append a shopper report (reason, reported_by)."""
        ...

    @abstractmethod
    def increment_helpful(self, review_id: str) -> int:
        """Add one to the review's helpful count and return the stored count."""
        ...
