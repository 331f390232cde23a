"""Storefront API package."""

from fastapi import FastAPI, Request

from storefront.api.admin import admin_router, report_router, user_admin_router
from storefront.api.errors import register_exception_handlers
from storefront.api.routes import (
    account_router,
    customer_router,
    order_router,
    product_router,
    wishlist_router,
)
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context

API_PREFIX = "/api"

ROUTERS = [
    account_router,
    product_router,
    order_router,
    customer_router,
    wishlist_router,
    admin_router,
    user_admin_router,
    report_router,
]


async def domain_context_middleware(request: Request, call_next):
    """Run each request inside the storefront domain context with fresh log context."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    with storefront.domain_context():
        return await call_next(request)


def mount(app: FastAPI) -> FastAPI:
    """Attach the storefront routers, error handlers and domain context to ``app``."""
    app.middleware("http")(domain_context_middleware)
    for router in ROUTERS:
        app.include_router(router, prefix=API_PREFIX)
    register_exception_handlers(app)
    return app


__all__ = ["API_PREFIX", "ROUTERS", "mount", "register_exception_handlers"]
