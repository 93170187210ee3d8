"""Tests for Review.submit and the review content invariants."""

import pytest
from protean.exceptions import ValidationError
from reviews.review.events import ReviewSubmitted
from reviews.review.review import Review, ReviewStatus


def _submit(**overrides):
    defaults = {
        "product_id": "ring-001",
        "user_id": "user-001",
        "user_name": "Amara",
        "rating": 5,
        "title": "Beautiful ring",
        "comment": "The stone catches the light wonderfully.",
    }
    defaults.update(overrides)
    return Review.submit(**defaults)


class TestSubmit:
    def test_new_review_is_pending(self):
        review = _submit()
        assert review.status == ReviewStatus.PENDING.value

    def test_new_review_starts_without_annotations(self):
        review = _submit()
        assert review.helpful_count == 0
        assert review.revision == 0
        assert len(review.admin_replies) == 0
        assert len(review.flags) == 0

    def test_timestamps_assigned(self):
        review = _submit()
        assert review.created_at is not None
        assert review.updated_at == review.created_at

    def test_title_and_comment_trimmed(self):
        review = _submit(title="  Sparkly  ", comment="   Lovely clasp, easy to wear.   ")
        assert review.title == "Sparkly"
        assert review.comment == "Lovely clasp, easy to wear."

    def test_optional_tags_kept(self):
        review = _submit(size="7", color="Rose Gold", is_verified_purchase=True)
        assert review.size == "7"
        assert review.color == "Rose Gold"
        assert review.is_verified_purchase is True

    def test_images_keep_their_order(self):
        review = _submit(images=["https://cdn.example/a.jpg", "https://cdn.example/b.jpg"])
        ordered = sorted(review.images, key=lambda i: i.display_order)
        assert [i.url for i in ordered] == ["https://cdn.example/a.jpg", "https://cdn.example/b.jpg"]

    def test_raises_submitted_event(self):
        review = _submit(images=["https://cdn.example/a.jpg"])
        assert len(review._events) == 1
        event = review._events[0]
        assert isinstance(event, ReviewSubmitted)
        assert str(event.review_id) == str(review.id)
        assert str(event.product_id) == "ring-001"
        assert event.rating == 5
        assert event.image_count == 1


class TestRatingRule:
    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_out_of_range_rating_rejected(self, rating):
        with pytest.raises(ValidationError) as exc:
            _submit(rating=rating)
        assert "Rating must be between 1 and 5" in str(exc.value)


class TestCommentLength:
    def test_nine_characters_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _submit(comment="a" * 9)
        assert "Review must be at least 10 characters long" in str(exc.value)

    def test_ten_characters_accepted(self):
        review = _submit(comment="a" * 10)
        assert review.comment == "a" * 10

    def test_padding_does_not_count(self):
        with pytest.raises(ValidationError) as exc:
            _submit(comment="   short   ")
        assert "Review must be at least 10 characters long" in str(exc.value)

    def test_over_maximum_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _submit(comment="a" * 1001)
        assert "Review cannot be longer than 1000 characters" in str(exc.value)


class TestTitleRule:
    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            _submit(title="   ")

    def test_overlong_title_rejected(self):
        with pytest.raises(ValidationError):
            _submit(title="t" * 101)


class TestImageLimit:
    def test_three_images_accepted(self):
        review = _submit(images=[f"https://cdn.example/{i}.jpg" for i in range(3)])
        assert len(review.images) == 3

    def test_four_images_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _submit(images=[f"https://cdn.example/{i}.jpg" for i in range(4)])
        assert "Cannot attach more than 3 images to a review" in str(exc.value)
