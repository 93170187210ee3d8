"""ReportReview — a shopper reports a review to the moderators.

Cannot report own review. Multiple shoppers can report the same review.
Reports are recorded on the review; moderators decide whether to flag it.
"""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class ReportReview:
    review_id = Identifier(required=True)
    reported_by = Identifier(required=True)
    reason = String(required=True, max_length=255)


@reviews.command_handler(part_of=Review)
class ReportReviewHandler:
    @handle(ReportReview)
    def report_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        review.report(
            reported_by=command.reported_by,
            reason=command.reason,
        )

        repo.add(review)
