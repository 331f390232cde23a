"""User aggregate: shopper and admin accounts.

``admin_role`` decides what a user may do (see
:mod:`storefront.identity.authorization`). There is exactly one
``main_admin``, seeded at startup; it cannot be granted, revoked or removed.
Removal is a soft delete that blocks login and invalidates issued tokens.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text

from storefront.domain import storefront
from storefront.identity.events import StandardAdminCreated, UserRegistered, UserRemoved, UserRoleChanged
from storefront.shared.email import is_valid_email, normalize_email


class AdminRole(Enum):
    NONE = "none"
    STANDARD_ADMIN = "standard_admin"
    MAIN_ADMIN = "main_admin"


class UserStatus(Enum):
    ACTIVE = "active"
    REMOVED = "removed"


# Roles the main admin may assign through role changes
ASSIGNABLE_ROLES = {AdminRole.NONE, AdminRole.STANDARD_ADMIN}


@storefront.aggregate
class User:
    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)
    admin_role: String(choices=AdminRole, default=AdminRole.NONE.value)
    security_key_hash: String(max_length=255)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    phone: String(max_length=20)
    address: Text()
    status: String(choices=UserStatus, default=UserStatus.ACTIVE.value)
    created_at: DateTime()

    @invariant.post
    def email_must_be_valid(self):
        if not is_valid_email(self.email):
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    @property
    def is_admin(self) -> bool:
        return self.admin_role in (AdminRole.STANDARD_ADMIN.value, AdminRole.MAIN_ADMIN.value)

    @property
    def is_main_admin(self) -> bool:
        return self.admin_role == AdminRole.MAIN_ADMIN.value

    @classmethod
    def register(cls, email, password_hash, first_name=None, last_name=None, phone=None, address=None):
        now = datetime.now(UTC)
        user = cls(
            email=normalize_email(email),
            password_hash=password_hash,
            admin_role=AdminRole.NONE.value,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            address=address,
            created_at=now,
        )
        user.raise_(UserRegistered(user_id=str(user.id), email=user.email, registered_at=now))
        return user

    @classmethod
    def create_standard_admin(cls, email, password_hash, security_key_hash, first_name=None, last_name=None, created_by=None):
        now = datetime.now(UTC)
        user = cls(
            email=normalize_email(email),
            password_hash=password_hash,
            admin_role=AdminRole.STANDARD_ADMIN.value,
            security_key_hash=security_key_hash,
            first_name=first_name,
            last_name=last_name,
            created_at=now,
        )
        user.raise_(
            StandardAdminCreated(
                user_id=str(user.id),
                email=user.email,
                created_by=created_by,
                created_at=now,
            )
        )
        return user

    @classmethod
    def main_admin(cls, email, password_hash):
        """The seeded main admin. Its security key is set on first admin login."""
        return cls(
            email=normalize_email(email),
            password_hash=password_hash,
            admin_role=AdminRole.MAIN_ADMIN.value,
            first_name="Main",
            last_name="Admin",
            created_at=datetime.now(UTC),
        )

    def record_security_key(self, security_key_hash):
        if not self.is_admin:
            raise ValidationError({"security_key": ["Only admins have a security key"]})
        self.security_key_hash = security_key_hash

    def change_role(self, new_role: str, changed_by=None) -> bool:
        """Switch between customer and standard admin. Returns ``False`` if unchanged."""
        try:
            target = AdminRole(new_role)
        except ValueError:
            raise ValidationError({"admin_role": [f"Unknown role: {new_role}"]}) from None

        if self.is_main_admin:
            raise ValidationError({"admin_role": ["The main admin's role cannot be changed"]})
        if target not in ASSIGNABLE_ROLES:
            raise ValidationError({"admin_role": [f"Role {target.value} cannot be assigned"]})
        if not self.is_active:
            raise ValidationError({"user": ["Removed users cannot be changed"]})
        if target.value == self.admin_role:
            return False

        previous = self.admin_role
        self.admin_role = target.value
        if target == AdminRole.NONE:
            self.security_key_hash = None

        self.raise_(
            UserRoleChanged(
                user_id=str(self.id),
                email=self.email,
                previous_role=previous,
                new_role=target.value,
                changed_by=changed_by,
                changed_at=datetime.now(UTC),
            )
        )
        return True

    def remove(self, removed_by=None):
        if self.is_main_admin:
            raise ValidationError({"user": ["The main admin cannot be removed"]})
        if not self.is_active:
            raise ValidationError({"user": ["User is already removed"]})

        self.status = UserStatus.REMOVED.value
        self.raise_(
            UserRemoved(
                user_id=str(self.id),
                email=self.email,
                removed_by=removed_by,
                removed_at=datetime.now(UTC),
            )
        )
