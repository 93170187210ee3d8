"""Pydantic request/response schemas for the Reviews API.

These are separate from the store's cache records (anti-corruption pattern).
The API layer is the external contract; records are internal to the store.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    product_id: str
    user_id: str
    user_name: str | None = None
    rating: int
    title: str
    comment: str
    images: list[str] = []
    size: str | None = None
    color: str | None = None
    is_verified_purchase: bool = False


class ReportReviewRequest(BaseModel):
    reported_by: str
    reason: str


class ModerateReviewRequest(BaseModel):
    action: str  # "approve", "reject" or "flag"
    note: str | None = None


class AddAdminReplyRequest(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class AdminReplyResponse(BaseModel):
    id: str
    admin_id: str
    admin_name: str
    admin_role: str
    message: str
    created_at: datetime
    sequence: int | None = None


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    user_name: str | None = None
    rating: int
    title: str
    comment: str
    images: list[str] = []
    size: str | None = None
    color: str | None = None
    is_verified_purchase: bool = False
    helpful_count: int = 0
    status: str
    admin_replies: list[AdminReplyResponse] = []
    created_at: datetime
