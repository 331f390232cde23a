"""Order queries and the response shape shared by the API and reports."""

from decimal import Decimal

from storefront.domain import storefront
from storefront.ordering.order import Order, OrderStatus
from storefront.shared.queries import fetch_all


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_idempotency_key(self, user_id, idempotency_key) -> Order | None:
        items = (
            self._dao.query.filter(user_id=str(user_id), idempotency_key=idempotency_key).limit(1).all().items
        )
        return items[0] if items else None

    def for_user(self, user_id) -> list[Order]:
        return fetch_all(Order, order_by="-created_at", user_id=str(user_id))

    def all_orders(self) -> list[Order]:
        return fetch_all(Order, order_by="-created_at")

    def delivered(self) -> list[Order]:
        return fetch_all(Order, status=OrderStatus.DELIVERED.value)


def order_view(order: Order) -> dict:
    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "customer_name": order.customer_name,
        "delivery_address": order.delivery_address,
        "contact_number": order.contact_number,
        "total": Decimal(order.total),
        "status": order.status,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "quantity": item.quantity,
                "price_at_time_of_order": Decimal(item.price_at_time_of_order),
            }
            for item in order.items
        ],
    }
