"""BDD tests for admin replies."""

from uuid import uuid4

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/admin_replies.feature")


@when(parsers.cfparse('admin "{admin_name}" replies "{message}"'), target_fixture="review")
def admin_replies(review, admin_name, message, error):
    try:
        review.add_admin_reply(
            reply_id=uuid4().hex,
            admin_id=f"admin-{admin_name.lower()}",
            admin_name=admin_name,
            admin_role="moderator",
            message=message,
        )
    except ValidationError as exc:
        error["exc"] = exc
    return review


@then(parsers.cfparse('reply {sequence:d} was written by "{admin_name}"'))
def reply_written_by(review, sequence, admin_name):
    reply = next(r for r in review.admin_replies if r.sequence == sequence)
    assert reply.admin_name == admin_name
