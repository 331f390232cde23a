"""Shopper registration and main admin seeding."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.authentication import hash_secret, validate_secret
from storefront.identity.user import User
from storefront.settings import get_settings
from storefront.shared.email import is_valid_email, normalize_email
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    """Create a shopper account. Carries the password hash, never the password."""

    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    phone: String(max_length=20)
    address: Text()


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        if repo.find_by_email(command.email) is not None:
            raise ValidationError({"email": ["User already exists"]})

        user = User.register(
            email=command.email,
            password_hash=command.password_hash,
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
            address=command.address,
        )
        repo.add(user)
        return str(user.id)


def register_user(email, password, first_name=None, last_name=None, phone=None, address=None) -> str:
    """Validate and hash the password, then register the account."""
    email = normalize_email(email)
    if not is_valid_email(email):
        raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
    validate_secret(password)

    return current_domain.process(
        RegisterUser(
            email=email,
            password_hash=hash_secret(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            address=address,
        ),
        asynchronous=False,
    )


def seed_main_admin() -> str:
    """Create the main admin from settings unless one already exists."""
    repo = current_domain.repository_for(User)
    existing = repo.find_main_admin()
    if existing is not None:
        return str(existing.id)

    settings = get_settings()
    admin = User.main_admin(email=settings.main_admin_email, password_hash=hash_secret(settings.main_admin_password))
    repo.add(admin)
    logger.info("main_admin_seeded", user_id=str(admin.id), email=admin.email)
    return str(admin.id)
