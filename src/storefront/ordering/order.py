"""Order aggregate: a customer's purchase with its priced line items.

The total and every line's ``price_at_time_of_order`` are captured when the
order is placed and never recomputed, even if product prices change later.
Line items are immutable once the order exists.

Status lifecycle::

    pending -> processing -> shipped -> delivered
    pending | processing -> cancelled

``delivered`` and ``cancelled`` are terminal.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.ordering.events import OrderPlaced, OrderStatusChanged
from storefront.ordering.pricing import line_total, order_total
from storefront.shared.errors import InvalidStatusTransition
from storefront.shared.money import format_amount


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def allowed_transitions(status: str) -> set[str]:
    return {s.value for s in _VALID_TRANSITIONS[OrderStatus(status)]}


def _parse_status(value: str, current: str) -> OrderStatus:
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError:
        raise InvalidStatusTransition(current, str(value)) from None


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price_at_time_of_order = String(required=True, max_length=20)

    @property
    def unit_price(self) -> Decimal:
        return Decimal(self.price_at_time_of_order)

    @property
    def line_total(self) -> Decimal:
        return line_total(self.unit_price, self.quantity)


@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    customer_name = String(required=True, max_length=255)
    delivery_address = String(required=True, max_length=1000)
    contact_number = String(required=True, max_length=50)
    total = String(required=True, max_length=20)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    idempotency_key = String(max_length=255)
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_line_items(self):
        if self.items and Decimal(self.total) != order_total((i.unit_price, i.quantity) for i in self.items):
            raise ValidationError({"total": ["Order total does not match its line items"]})

    @classmethod
    def place(
        cls,
        user_id,
        customer_name,
        delivery_address,
        contact_number,
        lines,
        idempotency_key=None,
    ):
        """Create a pending order.

        Args:
            lines: iterable of ``(product_id, product_name, unit_price, quantity)``
                with ``unit_price`` a Decimal taken from the product snapshot.
        """
        lines = list(lines)
        if not lines:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        now = datetime.now(UTC)
        total = order_total((price, qty) for _, _, price, qty in lines)

        order = cls(
            user_id=user_id,
            customer_name=customer_name,
            delivery_address=delivery_address,
            contact_number=contact_number,
            total=format_amount(total),
            status=OrderStatus.PENDING.value,
            idempotency_key=idempotency_key,
            items=[
                OrderItem(
                    product_id=product_id,
                    product_name=name,
                    quantity=qty,
                    price_at_time_of_order=format_amount(price),
                )
                for product_id, name, price, qty in lines
            ],
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "quantity": item.quantity,
                            "price_at_time_of_order": item.price_at_time_of_order,
                        }
                        for item in order.items
                    ]
                ),
                item_count=len(order.items),
                total=order.total,
                placed_at=now,
            )
        )
        return order

    def change_status(self, new_status: str, changed_by=None) -> bool:
        """Move to ``new_status`` if the transition table allows it.

        Returns ``False`` (and raises no event) when the order already has
        that status. Unknown statuses and disallowed edges raise
        ``InvalidStatusTransition`` and leave the order untouched.
        """
        current = OrderStatus(self.status)
        target = _parse_status(new_status, current.value)

        if target == current:
            return False

        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidStatusTransition(current.value, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_by=changed_by,
                changed_at=now,
            )
        )
        return True
