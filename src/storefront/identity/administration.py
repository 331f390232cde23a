"""Account administration performed by the main admin."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.authentication import hash_secret, validate_secret
from storefront.identity.user import User
from storefront.shared.email import is_valid_email, normalize_email


@storefront.command(part_of="User")
class CreateStandardAdmin:
    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)
    security_key_hash: String(required=True, max_length=255)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    created_by: Identifier()


@storefront.command(part_of="User")
class ChangeUserRole:
    user_id: Identifier(required=True)
    admin_role: String(required=True, max_length=50)
    changed_by: Identifier()


@storefront.command(part_of="User")
class RemoveUser:
    user_id: Identifier(required=True)
    removed_by: Identifier()


@storefront.command_handler(part_of=User)
class UserAdministrationHandler:
    @handle(CreateStandardAdmin)
    def create_standard_admin(self, command):
        repo = current_domain.repository_for(User)
        if repo.find_by_email(command.email) is not None:
            raise ValidationError({"email": ["User already exists"]})

        admin = User.create_standard_admin(
            email=command.email,
            password_hash=command.password_hash,
            security_key_hash=command.security_key_hash,
            first_name=command.first_name,
            last_name=command.last_name,
            created_by=command.created_by,
        )
        repo.add(admin)
        return str(admin.id)

    @handle(ChangeUserRole)
    def change_user_role(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        if user.change_role(command.admin_role, changed_by=command.changed_by):
            repo.add(user)
        return str(user.id)

    @handle(RemoveUser)
    def remove_user(self, command):
        if command.removed_by and str(command.removed_by) == str(command.user_id):
            raise ValidationError({"user": ["You cannot remove your own account"]})

        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.remove(removed_by=command.removed_by)
        repo.add(user)
        return str(user.id)


def create_standard_admin(email, password, security_key, first_name=None, last_name=None, created_by=None) -> str:
    email = normalize_email(email)
    if not is_valid_email(email):
        raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
    validate_secret(password)
    validate_secret(security_key, field="security_key")

    return current_domain.process(
        CreateStandardAdmin(
            email=email,
            password_hash=hash_secret(password),
            security_key_hash=hash_secret(security_key),
            first_name=first_name,
            last_name=last_name,
            created_by=created_by,
        ),
        asynchronous=False,
    )
