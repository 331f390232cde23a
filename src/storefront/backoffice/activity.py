"""Admin activity log.

Admin actions are recorded from the events they raise, after the action's
own Unit of Work has committed. Recording is best-effort: a failure is
logged and never undoes the action that triggered it.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.events import ProductAdded, ProductRemoved, ProductUpdated
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.identity.events import StandardAdminCreated, UserRemoved, UserRoleChanged
from storefront.identity.user import User
from storefront.ordering.events import OrderStatusChanged
from storefront.ordering.order import Order
from storefront.shared.queries import fetch_all
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

RECENT_LIMIT = 100


class ActionType(Enum):
    PRODUCT_ADDED = "Product Added"
    PRODUCT_UPDATED = "Product Updated"
    PRODUCT_DELETED = "Product Deleted"
    ORDER_STATUS_CHANGED = "Order Status Changed"
    ADMIN_CREATED = "Admin Created"
    USER_ROLE_CHANGED = "User Role Changed"
    USER_DELETED = "User Deleted"


@storefront.aggregate
class ActivityLogEntry:
    actor_id = Identifier()
    action_type = String(required=True, max_length=50, choices=ActionType)
    details = Text()  # JSON object
    timestamp = DateTime(required=True)


def record(actor_id, action_type: ActionType, details: dict, timestamp=None) -> str:
    entry = ActivityLogEntry(
        actor_id=actor_id,
        action_type=action_type.value,
        details=json.dumps(details, default=str),
        timestamp=timestamp or datetime.now(UTC),
    )
    current_domain.repository_for(ActivityLogEntry).add(entry)
    logger.info("admin_activity_recorded", action_type=action_type.value, actor_id=actor_id)
    return str(entry.id)


def _record_quietly(actor_id, action_type: ActionType, details: dict, timestamp) -> None:
    try:
        record(actor_id, action_type, details, timestamp)
    except Exception:
        logger.warning("admin_activity_not_recorded", action_type=action_type.value, exc_info=True)


def recent_activity(limit: int = RECENT_LIMIT) -> list[dict]:
    entries = fetch_all(ActivityLogEntry, order_by="-timestamp")[:limit]
    return [
        {
            "id": str(entry.id),
            "actor_id": entry.actor_id and str(entry.actor_id),
            "action_type": entry.action_type,
            "details": json.loads(entry.details) if entry.details else {},
            "timestamp": entry.timestamp,
        }
        for entry in entries
    ]


@storefront.event_handler(part_of=Order)
class OrderActivityRecorder:
    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        _record_quietly(
            event.changed_by,
            ActionType.ORDER_STATUS_CHANGED,
            {
                "order_id": str(event.order_id),
                "previous_status": event.previous_status,
                "new_status": event.new_status,
            },
            event.changed_at,
        )


@storefront.event_handler(part_of=Product)
class ProductActivityRecorder:
    @handle(ProductAdded)
    def on_product_added(self, event: ProductAdded) -> None:
        _record_quietly(
            event.added_by,
            ActionType.PRODUCT_ADDED,
            {"product_id": str(event.product_id), "name": event.name, "price": event.price},
            event.added_at,
        )

    @handle(ProductUpdated)
    def on_product_updated(self, event: ProductUpdated) -> None:
        _record_quietly(
            event.updated_by,
            ActionType.PRODUCT_UPDATED,
            {"product_id": str(event.product_id), "changes": json.loads(event.changes)},
            event.updated_at,
        )

    @handle(ProductRemoved)
    def on_product_removed(self, event: ProductRemoved) -> None:
        _record_quietly(
            event.removed_by,
            ActionType.PRODUCT_DELETED,
            {"product_id": str(event.product_id), "name": event.name},
            event.removed_at,
        )


@storefront.event_handler(part_of=User)
class UserActivityRecorder:
    @handle(StandardAdminCreated)
    def on_admin_created(self, event: StandardAdminCreated) -> None:
        _record_quietly(
            event.created_by,
            ActionType.ADMIN_CREATED,
            {"user_id": str(event.user_id), "email": event.email},
            event.created_at,
        )

    @handle(UserRoleChanged)
    def on_role_changed(self, event: UserRoleChanged) -> None:
        _record_quietly(
            event.changed_by,
            ActionType.USER_ROLE_CHANGED,
            {
                "user_id": str(event.user_id),
                "email": event.email,
                "previous_role": event.previous_role,
                "new_role": event.new_role,
            },
            event.changed_at,
        )

    @handle(UserRemoved)
    def on_user_removed(self, event: UserRemoved) -> None:
        _record_quietly(
            event.removed_by,
            ActionType.USER_DELETED,
            {"user_id": str(event.user_id), "email": event.email},
            event.removed_at,
        )
