"""FastAPI routes for shoppers: accounts, catalogue, orders, reviews, wishlist."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_principal, require
from storefront.api.schemas import (
    AdminLoginRequest,
    LoginRequest,
    MessageResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductRequest,
    ProductResponse,
    ProductUpdateRequest,
    RegisterRequest,
    RegisterResponse,
    ReviewRequest,
    ReviewResponse,
    SessionResponse,
    StatusChangeRequest,
    WishlistRequest,
    WishlistResponse,
)
from storefront.catalogue.browsing import browse_products, featured_products, get_product
from storefront.catalogue.management import AddProduct, RemoveProduct, UpdateProduct
from storefront.identity.authentication import admin_login, login
from storefront.identity.authorization import Capability, Principal, authorize_owner_or
from storefront.identity.registration import register_user
from storefront.ordering.order import Order
from storefront.ordering.placement import PlaceOrder, submit_order
from storefront.ordering.repository import order_view
from storefront.ordering.status import ChangeOrderStatus
from storefront.reviews.review import Review
from storefront.reviews.submission import SubmitReview, review_view, reviews_for_product
from storefront.wishlist.management import AddToWishlist, RemoveFromWishlist, wishlist_view

# ---------------------------------------------------------------------------
# Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(tags=["accounts"])


@account_router.post("/register", status_code=201, response_model=RegisterResponse)
async def register(body: RegisterRequest) -> RegisterResponse:
    user_id = register_user(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        address=body.address,
    )
    return RegisterResponse(user_id=user_id)


@account_router.post("/login", response_model=SessionResponse)
async def user_login(body: LoginRequest):
    return login(body.email, body.password)


@account_router.post("/admin/login", response_model=SessionResponse)
async def admin_user_login(body: AdminLoginRequest):
    return admin_login(body.email, body.password, body.security_key)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products(
    search: str | None = None,
    category: str | None = None,
    sort: str | None = Query(default=None, description="price_asc, price_desc, name or rating"),
):
    return browse_products(search=search, category=category, sort=sort)


@product_router.get("/featured", response_model=list[ProductResponse])
async def list_featured_products():
    return featured_products()


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str):
    return get_product(product_id)


@product_router.post("", status_code=201, response_model=ProductResponse)
async def add_product(
    body: ProductRequest,
    principal: Principal = Depends(require(Capability.MANAGE_CATALOGUE)),
):
    command = AddProduct(
        name=body.name,
        price=str(body.price),
        category=body.category,
        stock=body.stock,
        description=body.description,
        image_url=body.image_url,
        brand=body.brand,
        featured=body.featured,
        added_by=principal.user_id,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return get_product(product_id)


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: ProductUpdateRequest,
    principal: Principal = Depends(require(Capability.MANAGE_CATALOGUE)),
):
    changes = body.model_dump(exclude_none=True)
    if "price" in changes:
        changes["price"] = str(changes["price"])

    command = UpdateProduct(product_id=product_id, updated_by=principal.user_id, **changes)
    current_domain.process(command, asynchronous=False)
    return get_product(product_id)


@product_router.delete("/{product_id}", response_model=MessageResponse)
async def remove_product(
    product_id: str,
    principal: Principal = Depends(require(Capability.MANAGE_CATALOGUE)),
) -> MessageResponse:
    current_domain.process(RemoveProduct(product_id=product_id, removed_by=principal.user_id), asynchronous=False)
    return MessageResponse(message="Product deleted successfully")


@product_router.get("/{product_id}/reviews", response_model=list[ReviewResponse])
async def list_reviews(product_id: str):
    return [review_view(review) for review in reviews_for_product(product_id)]


@product_router.post("/{product_id}/reviews", status_code=201, response_model=ReviewResponse)
async def submit_review(
    product_id: str,
    body: ReviewRequest,
    principal: Principal = Depends(require(Capability.SHOP)),
):
    command = SubmitReview(
        product_id=product_id,
        user_id=principal.user_id,
        rating=body.rating,
        comment=body.comment,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return review_view(current_domain.repository_for(Review).get(review_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(
    body: PlaceOrderRequest,
    principal: Principal = Depends(require(Capability.SHOP)),
):
    command = PlaceOrder(
        user_id=principal.user_id,
        items=json.dumps([{"product_id": line.product_id, "quantity": line.quantity} for line in body.items]),
        customer_name=body.customer_name,
        delivery_address=body.delivery_address,
        contact_number=body.contact_number,
        idempotency_key=body.idempotency_key,
    )
    order_id = submit_order(command)
    return order_view(current_domain.repository_for(Order).get(order_id))


@order_router.get("/all", response_model=list[OrderResponse])
async def list_all_orders(principal: Principal = Depends(require(Capability.MANAGE_ORDERS))):
    return [order_view(order) for order in current_domain.repository_for(Order).all_orders()]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, principal: Principal = Depends(current_principal)):
    order = current_domain.repository_for(Order).get(order_id)
    authorize_owner_or(principal, order.user_id, Capability.MANAGE_ORDERS)
    return order_view(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_order_status(
    order_id: str,
    body: StatusChangeRequest,
    principal: Principal = Depends(require(Capability.MANAGE_ORDERS)),
):
    command = ChangeOrderStatus(order_id=order_id, status=body.status, changed_by=principal.user_id)
    current_domain.process(command, asynchronous=False)
    return order_view(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/users", tags=["customers"])


@customer_router.get("/{user_id}/orders", response_model=list[OrderResponse])
async def list_user_orders(user_id: str, principal: Principal = Depends(current_principal)):
    authorize_owner_or(principal, user_id, Capability.VIEW_CUSTOMERS)
    return [order_view(order) for order in current_domain.repository_for(Order).for_user(user_id)]


@customer_router.get("/{user_id}/wishlist", response_model=WishlistResponse)
async def user_wishlist(user_id: str, principal: Principal = Depends(current_principal)):
    authorize_owner_or(principal, user_id, Capability.VIEW_CUSTOMERS)
    return wishlist_view(user_id)


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@wishlist_router.post("", status_code=201, response_model=WishlistResponse)
async def add_to_wishlist(body: WishlistRequest, principal: Principal = Depends(require(Capability.SHOP))):
    current_domain.process(
        AddToWishlist(user_id=principal.user_id, product_id=body.product_id),
        asynchronous=False,
    )
    return wishlist_view(principal.user_id)


@wishlist_router.delete("/{product_id}", response_model=MessageResponse)
async def remove_from_wishlist(
    product_id: str,
    principal: Principal = Depends(require(Capability.SHOP)),
) -> MessageResponse:
    current_domain.process(
        RemoveFromWishlist(user_id=principal.user_id, product_id=product_id),
        asynchronous=False,
    )
    return MessageResponse(message="Removed from wishlist")
