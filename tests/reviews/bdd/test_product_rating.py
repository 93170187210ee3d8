"""BDD tests for the product rating summary, driven through the review store."""

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/product_rating.feature")


@pytest.fixture()
def seeded_reviews():
    return []


@given(parsers.cfparse('{article} {status} {rating:d} star review of "{product_id}"'))
def seed_review(collection, store, make_document, seeded_reviews, status, rating, product_id):
    document = make_document(product_id=product_id, rating=rating, status=status, minutes=len(seeded_reviews))
    seeded_reviews.append(collection.seed(document))


@when("a moderator approves the pending review")
def approve_pending(store, moderator):
    [pending] = store.reviews_for_moderation("pending")
    assert store.moderate(pending.id, "approve", moderator) is True


@then(parsers.cfparse('the average rating of "{product_id}" is {average:f}'))
def average_is(store, product_id, average):
    assert store.review_summary(product_id).average_rating == average


@then(parsers.cfparse('"{product_id}" has {total:d} counted reviews'))
def total_is(store, product_id, total):
    assert store.review_summary(product_id).total_reviews == total


@then(
    parsers.cfparse(
        'the "{product_id}" distribution is {five:d} five, {four:d} four, {three:d} three, {two:d} two, {one:d} one'
    )
)
def distribution_is(store, product_id, five, four, three, two, one):
    assert store.review_summary(product_id).rating_distribution == {5: five, 4: four, 3: three, 2: two, 1: one}
