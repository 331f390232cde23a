"""Runtime settings read from the environment.

Protean's own configuration (databases, brokers, processing mode) lives in
``domain.toml``. Settings here cover what the framework does not know about:
token signing, password hashing cost, the seeded main admin and CORS.
"""

import os
from dataclasses import dataclass, field


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    jwt_secret: str = field(default_factory=lambda: os.getenv("JWT_SECRET", "electrostore-dev-secret-change-me"))
    jwt_algorithm: str = field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    token_ttl_days: int = field(default_factory=lambda: int(os.getenv("TOKEN_TTL_DAYS", "7")))
    bcrypt_rounds: int = field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "12")))
    main_admin_email: str = field(default_factory=lambda: os.getenv("MAIN_ADMIN_EMAIL", "admin@electrostore.com"))
    main_admin_password: str = field(default_factory=lambda: os.getenv("MAIN_ADMIN_PASSWORD", "admin123"))
    cors_origins: list[str] = field(default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "*")))


def get_settings() -> Settings:
    """Build settings from the current environment.

    Not cached: tests override environment variables per session.
    """
    return Settings()
