"""Capability-based authorization.

Every protected operation names the capability it needs; ``authorize`` is
the single place that decides whether a caller holds it. Roles map to
capability sets, so adding an operation never means touching role checks
scattered across handlers.
"""

from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.identity.authentication import decode_token
from storefront.identity.user import AdminRole, User
from storefront.shared.errors import AuthenticationFailed, PermissionDenied


class Capability(Enum):
    SHOP = "shop"
    MANAGE_CATALOGUE = "manage_catalogue"
    MANAGE_ORDERS = "manage_orders"
    VIEW_CUSTOMERS = "view_customers"
    MANAGE_USERS = "manage_users"
    VIEW_REPORTS = "view_reports"


_CUSTOMER = frozenset({Capability.SHOP})
_STANDARD_ADMIN = _CUSTOMER | {Capability.MANAGE_CATALOGUE, Capability.MANAGE_ORDERS, Capability.VIEW_CUSTOMERS}
_MAIN_ADMIN = frozenset(Capability)

ROLE_CAPABILITIES = {
    AdminRole.NONE: _CUSTOMER,
    AdminRole.STANDARD_ADMIN: _STANDARD_ADMIN,
    AdminRole.MAIN_ADMIN: _MAIN_ADMIN,
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation."""

    user_id: str
    email: str
    role: AdminRole

    @property
    def capabilities(self) -> frozenset:
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


def principal_for(user: User) -> Principal:
    return Principal(user_id=str(user.id), email=user.email, role=AdminRole(user.admin_role))


def principal_from_token(token: str) -> Principal:
    """Resolve a bearer token to the current state of its user."""
    claims = decode_token(token)
    try:
        user = current_domain.repository_for(User).get(claims["sub"])
    except ObjectNotFoundError:
        raise AuthenticationFailed("Account no longer exists") from None
    if not user.is_active:
        raise AuthenticationFailed("Account no longer exists")
    return principal_for(user)


def authorize(principal: Principal, capability: Capability) -> Principal:
    if not principal.can(capability):
        raise PermissionDenied(f"This operation requires the {capability.value} capability")
    return principal


def authorize_owner_or(principal: Principal, owner_id, capability: Capability) -> Principal:
    """Allow the resource owner, or anyone holding ``capability``."""
    if str(owner_id) == principal.user_id:
        return principal
    return authorize(principal, capability)
