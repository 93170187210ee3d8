"""Shared BDD fixtures and step definitions for the Reviews domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from reviews.review.events import (
    AdminReplyAdded,
    ReviewMarkedHelpful,
    ReviewModerated,
    ReviewReported,
    ReviewSubmitted,
)
from reviews.review.review import Review

_REVIEW_EVENT_CLASSES = {
    "ReviewSubmitted": ReviewSubmitted,
    "ReviewModerated": ReviewModerated,
    "AdminReplyAdded": AdminReplyAdded,
    "ReviewMarkedHelpful": ReviewMarkedHelpful,
    "ReviewReported": ReviewReported,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending review", target_fixture="review")
def pending_review():
    review = Review.submit(
        product_id="ring-bdd",
        user_id="user-bdd",
        rating=4,
        title="BDD Test Review",
        comment="A BDD test review comment that is long enough.",
    )
    review._events.clear()
    return review


@given("an approved review", target_fixture="review")
def approved_review():
    review = Review.submit(
        product_id="ring-bdd-approved",
        user_id="user-bdd",
        rating=5,
        title="Approved Review",
        comment="An approved review comment that is long enough.",
    )
    review.moderate("approve", moderator_id="mod-001")
    review._events.clear()
    return review


@given(parsers.cfparse('the review was moderated with "{action}"'))
def review_was_moderated(review, action):
    review.moderate(action, moderator_id="mod-000")
    review._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the review status is "{status}"'))
def review_status_is(review, status):
    assert review.status == status


@then(parsers.cfparse("the review revision is {revision:d}"))
def review_revision_is(review, revision):
    assert review.revision == revision


@then("the review action fails with a validation error")
def review_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def review_event_raised(review, event_type):
    event_cls = _REVIEW_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in review._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in review._events]}"


@then(parsers.cfparse("the review helpful count is {count:d}"))
def review_helpful_count(review, count):
    assert review.helpful_count == count


@then(parsers.cfparse("the review has {count:d} admin replies"))
def review_has_n_replies(review, count):
    assert len(review.admin_replies) == count
