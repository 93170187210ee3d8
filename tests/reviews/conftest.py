"""Shared fixtures for the Reviews tests."""

from datetime import UTC, datetime, timedelta

import pytest
from reviews.admin.admin_user import AdminUser
from reviews.catalog.memory_adapter import InMemoryProductCatalog
from reviews.collection.memory_adapter import InMemoryReviewCollection
from reviews.store.records import ReviewDraft
from reviews.store.review_store import ReviewStore

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def review_document(minutes=0, **overrides):
    """A stored review document, created ``minutes`` after a fixed base time."""
    document = {
        "product_id": "ring-001",
        "user_id": "user-001",
        "user_name": "Amara",
        "rating": 5,
        "title": "Beautiful ring",
        "comment": "The stone catches the light wonderfully.",
        "images": [],
        "size": None,
        "color": None,
        "is_verified_purchase": False,
        "helpful_count": 0,
        "status": "pending",
        "admin_replies": [],
        "flags": [],
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    document.update(overrides)
    return document


def draft(**overrides):
    defaults = {
        "product_id": "ring-001",
        "user_id": "user-001",
        "user_name": "Amara",
        "rating": 5,
        "title": "Beautiful ring",
        "comment": "The stone catches the light wonderfully.",
    }
    defaults.update(overrides)
    return ReviewDraft(**defaults)


@pytest.fixture()
def collection():
    return InMemoryReviewCollection()


@pytest.fixture()
def catalog():
    return InMemoryProductCatalog({"ring-001": "Aurora Solitaire Ring", "necklace-001": "Luna Pearl Necklace"})


@pytest.fixture()
def store(collection, catalog):
    with ReviewStore(collection, catalog=catalog) as review_store:
        yield review_store


@pytest.fixture()
def moderator():
    return AdminUser.register(email="mod@zeloura.example", name="Maya Moderator", role="moderator")


@pytest.fixture()
def support_agent():
    return AdminUser.register(email="help@zeloura.example", name="Sam Support", role="customer_service")


@pytest.fixture()
def super_admin():
    return AdminUser.register(email="root@zeloura.example", name="Ada Admin", role="super_admin")


@pytest.fixture()
def read_only_admin():
    return AdminUser.register(
        email="viewer@zeloura.example",
        name="Val Viewer",
        role="customer_service",
        grants={"reviews": ["read"]},
    )


@pytest.fixture()
def make_document():
    return review_document


@pytest.fixture()
def make_draft():
    return draft
