"""Pydantic request/response schemas for the storefront API.

These are the external contract consumed by the web client, separate from
internal Protean commands. Fields are camelCase on the wire (snake_case is
accepted on input) and money is serialized as a decimal string.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(ApiModel):
    message: str


class ErrorResponse(ApiModel):
    reason: str
    message: str


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
class RegisterRequest(ApiModel):
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None


class RegisterResponse(ApiModel):
    message: str = "User registered successfully"
    user_id: str


class LoginRequest(ApiModel):
    email: str
    password: str


class AdminLoginRequest(LoginRequest):
    security_key: str


class UserResponse(ApiModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    admin_role: str
    created_at: datetime | None = None


class SessionResponse(ApiModel):
    token: str
    user: UserResponse


class CreateStandardAdminRequest(ApiModel):
    email: str
    password: str
    security_key: str
    first_name: str | None = None
    last_name: str | None = None


class ChangeRoleRequest(ApiModel):
    admin_role: Literal["none", "standard_admin"]


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class ProductRequest(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(gt=0, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    stock: int = Field(ge=0, default=0)
    description: str | None = None
    image_url: str | None = None
    brand: str | None = None
    featured: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Noise Cancelling Headphones",
                    "price": "249.99",
                    "category": "Audio",
                    "stock": 25,
                    "brand": "Sonix",
                    "featured": True,
                }
            ]
        }
    }


class ProductUpdateRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    stock: int | None = Field(default=None, ge=0)
    description: str | None = None
    image_url: str | None = None
    brand: str | None = None
    featured: bool | None = None


class ProductResponse(ApiModel):
    id: str
    name: str
    description: str | None = None
    price: Decimal
    image_url: str | None = None
    stock: int
    category: str
    brand: str | None = None
    featured: bool
    average_rating: float
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineRequest(ApiModel):
    product_id: str
    quantity: int = Field(ge=1)


class PlaceOrderRequest(ApiModel):
    items: list[OrderLineRequest] = Field(min_length=1)
    customer_name: str
    delivery_address: str
    contact_number: str
    idempotency_key: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"productId": "prod-001", "quantity": 2}],
                    "customerName": "Ada Lovelace",
                    "deliveryAddress": "12 Analytical Row, London",
                    "contactNumber": "+44 20 7946 0000",
                }
            ]
        }
    }


class OrderItemResponse(ApiModel):
    id: str
    product_id: str
    product_name: str | None = None
    quantity: int
    price_at_time_of_order: Decimal


class OrderResponse(ApiModel):
    id: str
    user_id: str
    customer_name: str
    delivery_address: str
    contact_number: str
    total: Decimal
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemResponse]


class StatusChangeRequest(ApiModel):
    status: str


# ---------------------------------------------------------------------------
# Reviews and wishlist
# ---------------------------------------------------------------------------
class ReviewRequest(ApiModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class ReviewResponse(ApiModel):
    id: str
    product_id: str
    user_id: str
    rating: int
    comment: str | None = None
    created_at: datetime | None = None


class WishlistRequest(ApiModel):
    product_id: str


class WishlistEntryResponse(ApiModel):
    added_at: datetime | None = None
    product: ProductResponse


class WishlistResponse(ApiModel):
    user_id: str
    items: list[WishlistEntryResponse]


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
class RevenueResponse(ApiModel):
    total_revenue: Decimal
    total_orders: int


class TopProductResponse(ApiModel):
    product_id: str
    name: str | None = None
    units_sold: int


class ActivityEntryResponse(ApiModel):
    id: str
    actor_id: str | None = None
    action_type: str
    details: dict[str, Any]
    timestamp: datetime
