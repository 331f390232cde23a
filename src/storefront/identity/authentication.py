"""Credentials and bearer tokens.

Passwords and admin security keys are stored as bcrypt hashes. Tokens are
HS256 JWTs carrying the user id and role; the role in a token is only a
hint, every request re-reads the user before authorizing.
"""

from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.identity.repository import user_view
from storefront.identity.user import User
from storefront.settings import get_settings
from storefront.shared.errors import AuthenticationFailed
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_SECRET_BYTES = 72


def validate_secret(secret: str, field: str = "password") -> None:
    if not secret or len(secret) < MIN_PASSWORD_LENGTH:
        raise ValidationError({field: [f"Must be at least {MIN_PASSWORD_LENGTH} characters"]})
    if len(secret.encode("utf-8")) > MAX_SECRET_BYTES:
        raise ValidationError({field: [f"Must be at most {MAX_SECRET_BYTES} bytes"]})


def hash_secret(secret: str) -> str:
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_secret(secret: str | None, hashed: str | None) -> bool:
    if not secret or not hashed:
        return False
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Oversized input or a malformed stored hash
        return False


def issue_token(user: User) -> str:
    settings = get_settings()
    now = datetime.now(UTC)
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.admin_role,
        "iat": now,
        "exp": now + timedelta(days=settings.token_ttl_days),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed("Token has expired") from None
    except jwt.PyJWTError:
        raise AuthenticationFailed("Invalid token") from None


def _session(user: User) -> dict:
    return {"token": issue_token(user), "user": user_view(user)}


def login(email: str, password: str) -> dict:
    user = current_domain.repository_for(User).find_by_email(email)
    if user is None or not user.is_active or not verify_secret(password, user.password_hash):
        logger.info("login_rejected", email=email)
        raise AuthenticationFailed()

    logger.info("login_succeeded", user_id=str(user.id))
    return _session(user)


def admin_login(email: str, password: str, security_key: str) -> dict:
    """Log an admin in with password and security key.

    The main admin has no key until their first admin login, which records
    the key supplied; every later login must present the same key.
    """
    repo = current_domain.repository_for(User)
    user = repo.find_by_email(email)
    if user is None or not user.is_active or not user.is_admin or not verify_secret(password, user.password_hash):
        logger.info("admin_login_rejected", email=email)
        raise AuthenticationFailed("Invalid admin credentials")

    if user.is_main_admin and not user.security_key_hash:
        validate_secret(security_key, field="security_key")
        user.record_security_key(hash_secret(security_key))
        repo.add(user)
        logger.info("main_admin_security_key_set", user_id=str(user.id))
    elif not verify_secret(security_key, user.security_key_hash):
        logger.info("admin_login_rejected", email=email, reason="security_key")
        raise AuthenticationFailed("Invalid security key")

    return _session(user)
