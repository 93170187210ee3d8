"""RegisterAdminUser — add a staff member who can work the admin panel."""

import json

from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from reviews.admin.admin_user import AdminUser
from reviews.domain import reviews


@reviews.command(part_of="AdminUser")
class RegisterAdminUser:
    email = String(required=True, max_length=254)
    name = String(required=True, max_length=100)
    role = String(required=True)
    grants = Text()  # JSON object: {resource: [actions]}; defaults to the role's grants


@reviews.command_handler(part_of=AdminUser)
class RegisterAdminUserHandler:
    @handle(RegisterAdminUser)
    def register_admin_user(self, command):
        repo = current_domain.repository_for(AdminUser)

        email = command.email.strip().lower()
        existing = repo._dao.query.filter(email=email).all()
        if existing.items:
            raise ValidationError({"email": ["An admin with this email already exists"]})

        admin = AdminUser.register(
            email=email,
            name=command.name,
            role=command.role,
            grants=json.loads(command.grants) if command.grants else None,
        )
        repo.add(admin)
        return str(admin.id)
