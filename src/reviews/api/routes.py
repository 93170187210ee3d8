"""FastAPI routes for the Reviews bounded context.

Shopper routes read and write through the ReviewStore held on the app
state. Admin routes identify the acting admin from the ``X-Admin-Id``
header and check the admin's permission before touching the store.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from reviews.admin.admin_user import Action, AdminUser, Resource
from reviews.api.schemas import (
    AddAdminReplyRequest,
    AdminReplyResponse,
    ModerateReviewRequest,
    ReportReviewRequest,
    ReviewResponse,
    StatusResponse,
    SubmitReviewRequest,
)
from reviews.projections.moderation_queue import ModerationQueueEntry
from reviews.projections.moderation_stats import ModerationStats
from reviews.projections.product_rating import ProductRating
from reviews.projections.review_listing import ReviewFilter, SortOrder
from reviews.review.review import ReviewStatus
from reviews.store.records import ReviewDraft
from reviews.store.review_store import ReviewStore

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
async def get_review_store(request: Request) -> ReviewStore:
    return request.app.state.review_store


async def get_admin(x_admin_id: Annotated[str | None, Header()] = None) -> AdminUser:
    """Load the acting admin and stamp their login, or answer 401."""
    if not x_admin_id:
        raise HTTPException(status_code=401, detail="Admin identification required")
    repo = current_domain.repository_for(AdminUser)
    try:
        admin = repo.get(x_admin_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=401, detail="Unknown admin") from None

    admin.record_login()
    repo.add(admin)
    return admin


def _require(admin: AdminUser, resource: Resource, action: Action):
    if not admin.has_permission(resource, action):
        raise HTTPException(status_code=403, detail=f"Not allowed to {action.value} {resource.value}")


def _require_review(store: ReviewStore, review_id: str):
    if store.get(review_id) is None:
        raise HTTPException(status_code=404, detail=f"Review {review_id} not found")


def _unavailable(detail: str):
    return HTTPException(status_code=503, detail=detail)


StoreDep = Annotated[ReviewStore, Depends(get_review_store)]
AdminDep = Annotated[AdminUser, Depends(get_admin)]


# ---------------------------------------------------------------------------
# Shopper routes
# ---------------------------------------------------------------------------
@review_router.post("", status_code=201, response_model=StatusResponse)
async def submit_review(body: SubmitReviewRequest, store: StoreDep) -> StatusResponse:
    """Submit a review. It is held for moderation."""
    draft = ReviewDraft(**body.model_dump())
    if not store.submit(draft):
        raise _unavailable("Review could not be saved")
    return StatusResponse(status="pending")


@review_router.get("/products/{product_id}", response_model=list[ReviewResponse])
async def list_product_reviews(
    product_id: str,
    store: StoreDep,
    sort: SortOrder = SortOrder.NEWEST,
    filter: ReviewFilter = ReviewFilter.ALL,  # noqa: A002
) -> list[ReviewResponse]:
    """Approved reviews of a product."""
    records = store.browse(product_id, filter_by=filter, sort_by=sort)
    return [ReviewResponse.model_validate(record.model_dump()) for record in records]


@review_router.get("/products/{product_id}/summary", response_model=ProductRating)
async def product_summary(product_id: str, store: StoreDep) -> ProductRating:
    return store.review_summary(product_id)


@review_router.post("/{review_id}/helpful", response_model=StatusResponse)
async def mark_helpful(review_id: str, store: StoreDep) -> StatusResponse:
    _require_review(store, review_id)
    if not store.mark_helpful(review_id):
        raise _unavailable("Helpful vote could not be saved")
    return StatusResponse()


@review_router.post("/{review_id}/reports", status_code=201, response_model=StatusResponse)
async def report_review(review_id: str, body: ReportReviewRequest, store: StoreDep) -> StatusResponse:
    _require_review(store, review_id)
    if not store.report(review_id, reason=body.reason, reported_by=body.reported_by):
        raise _unavailable("Report could not be saved")
    return StatusResponse()


# ---------------------------------------------------------------------------
# Admin routes
# ---------------------------------------------------------------------------
@review_router.get("/moderation", response_model=list[ModerationQueueEntry])
async def moderation_queue(
    store: StoreDep,
    admin: AdminDep,
    status: ReviewStatus | None = None,
) -> list[ModerationQueueEntry]:
    """Pending and flagged reviews, or only those with ``status``."""
    _require(admin, Resource.REVIEWS, Action.READ)
    return store.moderation_queue(status)


@review_router.get("/stats", response_model=ModerationStats)
async def moderation_stats(store: StoreDep, admin: AdminDep) -> ModerationStats:
    _require(admin, Resource.REVIEWS, Action.READ)
    return store.stats()


@review_router.put("/{review_id}/moderate", response_model=StatusResponse)
async def moderate_review(
    review_id: str,
    body: ModerateReviewRequest,
    store: StoreDep,
    admin: AdminDep,
) -> StatusResponse:
    """Approve, reject or flag a review."""
    _require(admin, Resource.REVIEWS, Action.MODERATE)
    _require_review(store, review_id)
    if not store.moderate(review_id, body.action, admin, note=body.note):
        raise _unavailable("Review could not be moderated")
    return StatusResponse(status=store.get(review_id).status)


@review_router.post("/{review_id}/replies", status_code=201, response_model=AdminReplyResponse)
async def add_admin_reply(
    review_id: str,
    body: AddAdminReplyRequest,
    store: StoreDep,
    admin: AdminDep,
) -> AdminReplyResponse:
    _require(admin, Resource.REVIEWS, Action.WRITE)
    _require_review(store, review_id)
    reply = store.add_reply(review_id, admin, body.message)
    if reply is None:
        raise _unavailable("Reply could not be saved")
    return AdminReplyResponse.model_validate(reply.model_dump())
