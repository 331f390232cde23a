"""Order placement: price the cart, record the order and reserve its stock.

The whole workflow runs inside the command handler's Unit of Work, so a
failure at any step (unknown product, short stock, a lost stock race, a
storage error) rolls back the order, its line items and every stock
decrement already made.

Stock is checked against one snapshot per product and then decremented with
a guard on that same observed value. If another order changed the stock in
between, the guard matches no row and the workflow aborts with
``StockConflict`` instead of overselling.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.ordering.order import Order
from storefront.shared.errors import (
    InsufficientStock,
    PersistenceFailure,
    ProductNotFound,
    StockConflict,
    StorefrontError,
    WorkflowTimeout,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out", "canceling statement", "lock wait")


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{"product_id": ..., "quantity": ...}]
    customer_name = String(required=True, max_length=255)
    delivery_address = String(required=True, max_length=1000)
    contact_number = String(required=True, max_length=50)
    idempotency_key = String(max_length=255)


def parse_lines(raw) -> list[tuple[str, int]]:
    """Validate requested lines and merge repeats of the same product.

    Returns ``(product_id, quantity)`` pairs in first-seen order.
    """
    try:
        entries = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        raise ValidationError({"items": ["Items must be a JSON list"]}) from None

    if not isinstance(entries, list) or not entries:
        raise ValidationError({"items": ["At least one item is required"]})

    merged: dict[str, int] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError({"items": ["Each item needs a product_id and a quantity"]})

        product_id = entry.get("product_id")
        quantity = entry.get("quantity")
        if not product_id or not str(product_id).strip():
            raise ValidationError({"items": ["Each item needs a product_id"]})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": [f"Quantity for {product_id} must be a whole number of at least 1"]})

        key = str(product_id).strip()
        merged[key] = merged.get(key, 0) + quantity

    return list(merged.items())


def _delivery_details(command) -> dict:
    details = {
        "customer_name": (command.customer_name or "").strip(),
        "delivery_address": (command.delivery_address or "").strip(),
        "contact_number": (command.contact_number or "").strip(),
    }
    missing = {name: ["Cannot be blank"] for name, value in details.items() if not value}
    if missing:
        raise ValidationError(missing)
    return details


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = parse_lines(command.items)
        delivery = _delivery_details(command)

        orders = current_domain.repository_for(Order)
        if command.idempotency_key:
            existing = orders.find_by_idempotency_key(command.user_id, command.idempotency_key)
            if existing is not None:
                logger.info(
                    "order_replayed",
                    order_id=str(existing.id),
                    idempotency_key=command.idempotency_key,
                )
                return str(existing.id)

        products = current_domain.repository_for(Product)

        snapshots = {}
        for product_id, _ in lines:
            snapshot = products.snapshot(product_id)
            if snapshot is None:
                raise ProductNotFound(product_id)
            snapshots[product_id] = snapshot

        for product_id, quantity in lines:
            snapshot = snapshots[product_id]
            if quantity > snapshot.stock:
                raise InsufficientStock(product_id, quantity, snapshot.stock, name=snapshot.name)

        order = Order.place(
            user_id=command.user_id,
            lines=[
                (product_id, snapshots[product_id].name, snapshots[product_id].price, quantity)
                for product_id, quantity in lines
            ],
            idempotency_key=command.idempotency_key,
            **delivery,
        )
        orders.add(order)

        for product_id, quantity in lines:
            if not products.reserve(product_id, quantity, snapshots[product_id].stock):
                logger.warning("stock_conflict", order_id=str(order.id), product_id=product_id)
                raise StockConflict(product_id)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            user_id=str(command.user_id),
            lines=len(lines),
            total=order.total,
        )
        return str(order.id)


def _looks_like_timeout(exc: Exception) -> bool:
    text = str(exc).lower()
    return isinstance(exc, PoolTimeoutError) or any(marker in text for marker in _TIMEOUT_MARKERS)


def _is_transaction_failure(exc: ValidationError) -> bool:
    """Protean reports a failed commit as a ValidationError on ``_entity``."""
    messages = getattr(exc, "messages", None) or {}
    return any("transaction" in str(msg).lower() for msg in messages.get("_entity", []))


def submit_order(command: PlaceOrder) -> str:
    """Run the placement workflow and translate storage failures.

    Domain failures (validation, unknown products, stock) pass through
    unchanged. Storage failures become ``WorkflowTimeout`` when the database
    gave up waiting and ``PersistenceFailure`` otherwise; in both cases the
    transaction was rolled back and the caller may retry.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except StorefrontError:
        raise
    except SQLAlchemyError as exc:
        logger.error("order_persistence_failed", error=exc.__class__.__name__)
        if _looks_like_timeout(exc):
            raise WorkflowTimeout() from exc
        raise PersistenceFailure() from exc
    except ValidationError as exc:
        if not _is_transaction_failure(exc):
            raise
        logger.error("order_transaction_failed")
        if _looks_like_timeout(exc):
            raise WorkflowTimeout() from exc
        raise PersistenceFailure() from exc
