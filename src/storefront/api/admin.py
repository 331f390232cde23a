"""FastAPI routes for the admin console: admin accounts, users, reports, activity log."""

import json
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from protean.utils.globals import current_domain

from storefront.api.dependencies import require
from storefront.api.schemas import (
    ActivityEntryResponse,
    ChangeRoleRequest,
    CreateStandardAdminRequest,
    MessageResponse,
    RegisterResponse,
    RevenueResponse,
    TopProductResponse,
    UserResponse,
)
from storefront.backoffice.activity import recent_activity
from storefront.backoffice.reports import revenue_stats, top_products
from storefront.catalogue.browsing import export_products
from storefront.identity.administration import ChangeUserRole, RemoveUser, create_standard_admin
from storefront.identity.authorization import Capability, Principal
from storefront.identity.repository import user_view
from storefront.identity.user import User

# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.post("/create-standard-admin", status_code=201, response_model=RegisterResponse)
async def create_admin(
    body: CreateStandardAdminRequest,
    principal: Principal = Depends(require(Capability.MANAGE_USERS)),
) -> RegisterResponse:
    user_id = create_standard_admin(
        email=body.email,
        password=body.password,
        security_key=body.security_key,
        first_name=body.first_name,
        last_name=body.last_name,
        created_by=principal.user_id,
    )
    return RegisterResponse(message="Standard admin created successfully", user_id=user_id)


@admin_router.get("/activity-log", response_model=list[ActivityEntryResponse])
async def activity_log(principal: Principal = Depends(require(Capability.VIEW_REPORTS))):
    return recent_activity()


# ---------------------------------------------------------------------------
# User Management Router
# ---------------------------------------------------------------------------
user_admin_router = APIRouter(prefix="/users", tags=["admin"])


@user_admin_router.get("/all", response_model=list[UserResponse])
async def list_users(principal: Principal = Depends(require(Capability.MANAGE_USERS))):
    return [user_view(user) for user in current_domain.repository_for(User).active_users()]


@user_admin_router.delete("/{user_id}", response_model=MessageResponse)
async def remove_user(
    user_id: str,
    principal: Principal = Depends(require(Capability.MANAGE_USERS)),
) -> MessageResponse:
    current_domain.process(RemoveUser(user_id=user_id, removed_by=principal.user_id), asynchronous=False)
    return MessageResponse(message="User deleted successfully")


@user_admin_router.put("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: str,
    body: ChangeRoleRequest,
    principal: Principal = Depends(require(Capability.MANAGE_USERS)),
):
    command = ChangeUserRole(user_id=user_id, admin_role=body.admin_role, changed_by=principal.user_id)
    current_domain.process(command, asynchronous=False)
    return user_view(current_domain.repository_for(User).get(user_id))


# ---------------------------------------------------------------------------
# Report Router
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/reports", tags=["reports"])


@report_router.get("/revenue", response_model=RevenueResponse)
async def revenue(principal: Principal = Depends(require(Capability.VIEW_REPORTS))):
    return revenue_stats()


@report_router.get("/top-products", response_model=list[TopProductResponse])
async def best_sellers(principal: Principal = Depends(require(Capability.VIEW_REPORTS))):
    return top_products()


@report_router.get("/products/download")
async def download_products(principal: Principal = Depends(require(Capability.VIEW_REPORTS))) -> Response:
    filename = f"products-{datetime.now(UTC):%Y%m%d}.json"
    return Response(
        content=json.dumps(export_products(), default=str, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
