"""ModerationStats — counts for the admin dashboard, across every status."""

from collections import Counter

from pydantic import BaseModel

from reviews.projections.product_rating import round_half_up
from reviews.review.review import ReviewStatus


class ModerationStats(BaseModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    flagged: int = 0
    rejected: int = 0
    approval_rate: int = 0  # whole percent


def compute_stats(reviews) -> ModerationStats:
    counts = Counter(r.status for r in reviews)
    total = sum(counts.values())
    approved = counts[ReviewStatus.APPROVED.value]

    return ModerationStats(
        total=total,
        approved=approved,
        pending=counts[ReviewStatus.PENDING.value],
        flagged=counts[ReviewStatus.FLAGGED.value],
        rejected=counts[ReviewStatus.REJECTED.value],
        approval_rate=int(round_half_up(approved * 100 / total)) if total else 0,
    )
