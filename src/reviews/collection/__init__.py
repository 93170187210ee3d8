"""Review collection abstraction — pluggable storage for review documents."""

import os

from reviews.collection.port import ReviewCollectionPort


def create_collection(adapter: str | None = None) -> ReviewCollectionPort:
    """Build the configured review collection adapter.

    Uses the in-memory collection by default. Set REVIEWS_COLLECTION_ADAPTER
    to "domain" to route writes through the Protean reviews domain.
    """
    adapter = adapter or os.environ.get("REVIEWS_COLLECTION_ADAPTER", "memory")

    if adapter == "memory":
        from reviews.collection.memory_adapter import InMemoryReviewCollection

        return InMemoryReviewCollection()

    if adapter == "domain":
        from reviews.collection.domain_adapter import DEFAULT_SNAPSHOT_LIMIT, DomainReviewCollection
        from reviews.domain import reviews

        limit = int(os.environ.get("REVIEWS_SNAPSHOT_LIMIT", DEFAULT_SNAPSHOT_LIMIT))
        return DomainReviewCollection(reviews, snapshot_limit=limit)

    raise ValueError(f"Unknown review collection adapter: {adapter}")


__all__ = ["ReviewCollectionPort", "create_collection"]
