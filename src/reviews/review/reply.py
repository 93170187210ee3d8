"""AddAdminReply — attach a staff reply to a review.

Replies are appended in commit order and numbered by the aggregate, so
replies from several admins are all kept.
"""

from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.domain import reviews
from reviews.review.review import Review


@reviews.command(part_of="Review")
class AddAdminReply:
    review_id = Identifier(required=True)
    reply_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    admin_name = String(required=True, max_length=100)
    admin_role = String(required=True, max_length=50)
    message = Text(required=True)
    created_at = DateTime()


@reviews.command_handler(part_of=Review)
class AddAdminReplyHandler:
    @handle(AddAdminReply)
    def add_admin_reply(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        reply = review.add_admin_reply(
            reply_id=command.reply_id,
            admin_id=command.admin_id,
            admin_name=command.admin_name,
            admin_role=command.admin_role,
            message=command.message,
            created_at=command.created_at,
        )

        repo.add(review)
        return reply.sequence
