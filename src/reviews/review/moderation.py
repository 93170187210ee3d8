"""ModerateReview — approve, reject or flag a review.

Carries the revision the moderator last saw. When it no longer matches the
stored revision another moderator got there first and the command fails
instead of silently overwriting their decision.
"""

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import logger, reviews
from reviews.errors import RevisionConflictError
from reviews.review.review import Review


@reviews.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    action = String(required=True)  # "approve", "reject" or "flag"
    note = Text()
    expected_revision = Integer()


@reviews.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        if command.expected_revision is not None and command.expected_revision != review.revision:
            logger.warning(
                "Stale moderation rejected",
                review_id=str(command.review_id),
                expected_revision=command.expected_revision,
                revision=review.revision,
            )
            raise RevisionConflictError(str(command.review_id), command.expected_revision, review.revision)

        review.moderate(
            action=command.action,
            moderator_id=command.moderator_id,
            note=command.note,
        )

        repo.add(review)
