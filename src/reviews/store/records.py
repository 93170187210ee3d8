"""Pydantic models for the review store's local cache.

Collection documents are validated into these records when a snapshot
arrives; the store never hands out raw documents.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from reviews.review.review import (
    MAX_COMMENT_LENGTH,
    MAX_IMAGES,
    MAX_RATING,
    MAX_TITLE_LENGTH,
    MIN_COMMENT_LENGTH,
    MIN_RATING,
    ReviewStatus,
)


class AdminReplyRecord(BaseModel):
    id: str
    admin_id: str
    admin_name: str
    admin_role: str
    message: str
    created_at: datetime
    sequence: int | None = None


class ReviewFlagRecord(BaseModel):
    reason: str
    reported_by: str
    created_at: datetime | None = None


class ReviewRecord(BaseModel):
    id: str
    product_id: str
    user_id: str
    user_name: str | None = None
    rating: int
    title: str
    comment: str
    images: list[str] = Field(default_factory=list)
    size: str | None = None
    color: str | None = None
    is_verified_purchase: bool = False
    helpful_count: int = 0
    status: str = ReviewStatus.PENDING.value
    moderated_by: str | None = None
    moderated_at: datetime | None = None
    moderation_note: str | None = None
    revision: int = 0
    admin_replies: list[AdminReplyRecord] = Field(default_factory=list)
    flags: list[ReviewFlagRecord] = Field(default_factory=list)
    created_at: datetime

    @property
    def is_approved(self) -> bool:
        return self.status == ReviewStatus.APPROVED.value


class ReviewDraft(BaseModel):
    """What a shopper fills in on the review form."""

    product_id: str
    user_id: str
    user_name: str | None = None
    rating: int
    title: str
    comment: str
    images: list[str] = Field(default_factory=list)
    size: str | None = None
    color: str | None = None
    is_verified_purchase: bool = False

    def validation_errors(self) -> dict[str, list[str]]:
        """Return field → messages for everything wrong with the draft."""
        errors: dict[str, list[str]] = {}

        if not self.product_id.strip():
            errors["product_id"] = ["Product is required"]

        if not MIN_RATING <= self.rating <= MAX_RATING:
            errors["rating"] = ["Rating must be between 1 and 5"]

        title = self.title.strip()
        if not title:
            errors["title"] = ["Review title cannot be empty"]
        elif len(title) > MAX_TITLE_LENGTH:
            errors["title"] = [f"Review title cannot be longer than {MAX_TITLE_LENGTH} characters"]

        comment = self.comment.strip()
        if len(comment) < MIN_COMMENT_LENGTH:
            errors["comment"] = [f"Review must be at least {MIN_COMMENT_LENGTH} characters long"]
        elif len(comment) > MAX_COMMENT_LENGTH:
            errors["comment"] = [f"Review cannot be longer than {MAX_COMMENT_LENGTH} characters"]

        if len(self.images) > MAX_IMAGES:
            errors["images"] = [f"Cannot attach more than {MAX_IMAGES} images to a review"]

        return errors

    def to_document(self) -> dict:
        """A new pending review document; the collection fills in id and timestamps."""
        return {
            "product_id": self.product_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "rating": self.rating,
            "title": self.title.strip(),
            "comment": self.comment.strip(),
            "images": list(self.images),
            "size": self.size,
            "color": self.color,
            "is_verified_purchase": self.is_verified_purchase,
            "status": ReviewStatus.PENDING.value,
            "helpful_count": 0,
            "admin_replies": [],
            "flags": [],
        }
