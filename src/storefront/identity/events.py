"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="User")
class UserRegistered:
    """A shopper created an account."""

    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="User")
class StandardAdminCreated:
    """The main admin created a standard admin account."""

    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    created_by = Identifier()
    created_at = DateTime(required=True)


@storefront.event(part_of="User")
class UserRoleChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    previous_role = String(required=True)
    new_role = String(required=True)
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@storefront.event(part_of="User")
class UserRemoved:
    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    removed_by = Identifier()
    removed_at = DateTime(required=True)
