"""FastAPI dependencies resolving the caller and checking capabilities."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.identity.authorization import Capability, Principal, authorize, principal_from_token
from storefront.shared.errors import AuthenticationFailed
from storefront.utils.logging import add_context

bearer = HTTPBearer(auto_error=False)


async def current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Principal:
    if credentials is None:
        raise AuthenticationFailed("Authentication required")

    principal = principal_from_token(credentials.credentials)
    add_context(user_id=principal.user_id)
    return principal


def require(capability: Capability):
    """Dependency factory: the caller must hold ``capability``."""

    async def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        return authorize(principal, capability)

    return dependency
