"""AdminUser aggregate — staff who moderate and answer reviews.

Authorization goes through one check, ``AdminUser.has_permission``. Grants
come from the admin's role unless explicit grants are supplied, and the
``super_admin`` role is the platform-admin override that passes every check.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, String, Text

from reviews.domain import reviews
from reviews.errors import AuthorizationError


class AdminRole(Enum):
    SUPER_ADMIN = "super_admin"
    MODERATOR = "moderator"
    CUSTOMER_SERVICE = "customer_service"


class Resource(Enum):
    REVIEWS = "reviews"
    PRODUCTS = "products"
    USERS = "users"
    ORDERS = "orders"
    ANALYTICS = "analytics"


class Action(Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    MODERATE = "moderate"


ROLE_GRANTS = {
    AdminRole.SUPER_ADMIN: {resource.value: [action.value for action in Action] for resource in Resource},
    AdminRole.MODERATOR: {
        Resource.REVIEWS.value: [Action.READ.value, Action.WRITE.value, Action.MODERATE.value],
        Resource.PRODUCTS.value: [Action.READ.value],
    },
    AdminRole.CUSTOMER_SERVICE: {
        Resource.REVIEWS.value: [Action.READ.value, Action.WRITE.value],
        Resource.ORDERS.value: [Action.READ.value],
        Resource.USERS.value: [Action.READ.value],
    },
}


@reviews.entity(part_of="AdminUser")
class Permission:
    """The actions an admin may take on one resource."""

    resource = String(required=True, choices=Resource)
    actions = Text(required=True)  # JSON array of Action values

    @invariant.post
    def actions_must_be_known(self):
        if not self.actions:
            return
        known = {action.value for action in Action}
        unknown = [a for a in json.loads(self.actions) if a not in known]
        if unknown:
            raise ValidationError({"actions": [f"Unknown actions: {', '.join(unknown)}"]})

    def allows(self, action) -> bool:
        return action in json.loads(self.actions)


@reviews.aggregate
class AdminUser:
    email = String(required=True, max_length=254)
    name = String(required=True, max_length=100)
    role = String(required=True, choices=AdminRole)
    permissions = HasMany(Permission)
    last_login_at = DateTime()

    @classmethod
    def register(cls, email, name, role, grants=None):
        """Create an admin. ``grants`` maps resource → actions; defaults to the role's."""
        try:
            admin_role = AdminRole(role)
        except ValueError:
            raise ValidationError({"role": [f"Unknown admin role: {role}"]}) from None

        admin = cls(email=email.strip().lower(), name=name, role=admin_role.value)

        for resource, actions in (grants if grants is not None else ROLE_GRANTS[admin_role]).items():
            admin.add_permissions(Permission(resource=resource, actions=json.dumps(list(actions))))

        return admin

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.SUPER_ADMIN.value

    def has_permission(self, resource, action) -> bool:
        if self.is_super_admin:
            return True

        resource = resource.value if isinstance(resource, Resource) else resource
        action = action.value if isinstance(action, Action) else action

        permission = next((p for p in self.permissions if p.resource == resource), None)
        return permission.allows(action) if permission else False

    def record_login(self):
        self.last_login_at = datetime.now(UTC)


def require_permission(admin, resource, action):
    """Raise AuthorizationError unless ``admin`` holds the permission."""
    if admin is None or not admin.has_permission(resource, action):
        raise AuthorizationError(
            str(admin.id) if admin is not None else None,
            resource.value if isinstance(resource, Resource) else resource,
            action.value if isinstance(action, Action) else action,
        )
