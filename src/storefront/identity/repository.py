"""User lookups and the public account view."""

from storefront.domain import storefront
from storefront.identity.user import AdminRole, User, UserStatus
from storefront.shared.email import normalize_email
from storefront.shared.queries import fetch_all


@storefront.repository(part_of=User)
class UserRepository:
    def find_by_email(self, email) -> User | None:
        items = self._dao.query.filter(email=normalize_email(email)).limit(1).all().items
        return items[0] if items else None

    def find_main_admin(self) -> User | None:
        items = self._dao.query.filter(admin_role=AdminRole.MAIN_ADMIN.value).limit(1).all().items
        return items[0] if items else None

    def active_users(self) -> list[User]:
        return fetch_all(User, order_by="-created_at", status=UserStatus.ACTIVE.value)


def user_view(user: User) -> dict:
    """Account details safe to return to clients (no hashes)."""
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "address": user.address,
        "admin_role": user.admin_role,
        "created_at": user.created_at,
    }
