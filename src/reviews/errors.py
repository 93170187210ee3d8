"""Errors raised at the review store boundary.

Malformed input uses ``protean.exceptions.ValidationError`` like the rest of
the domain; these cover the remote collection and the admin checks.
"""


class ReviewStoreError(Exception):
    """Base class for review store failures."""


class PersistenceError(ReviewStoreError):
    """A read or write against the review collection failed."""


class RevisionConflictError(PersistenceError):
    """The review was moderated by someone else since it was last read."""

    def __init__(self, review_id: str, expected: int, actual: int):
        self.review_id = review_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Review {review_id} is at revision {actual}, expected {expected}")


class AuthorizationError(ReviewStoreError):
    """The acting admin lacks the permission the operation needs."""

    def __init__(self, admin_id: str | None, resource: str, action: str):
        self.admin_id = admin_id
        self.resource = resource
        self.action = action
        super().__init__(f"Admin {admin_id} may not {action} {resource}")
