"""Failure categories surfaced by storefront operations.

Each category builds on the Protean exception the framework already treats
the same way (``ValidationError`` for rejected input, ``InvalidOperationError``
for operations the current state forbids) and carries a stable ``reason``
plus the HTTP status the API layer answers with.
"""

from protean.exceptions import InvalidOperationError, ValidationError


class StorefrontError(Exception):
    """Mixin carrying the category name and the HTTP status for a failure."""

    reason = "Error"
    status_code = 500

    def _init_messages(self, message: str, field: str = "_entity") -> None:
        self.message = message
        self.messages = {field: [message]}
        self.extra_info = None
        Exception.__init__(self, message)

    def __str__(self) -> str:
        return self.message


class ProductNotFound(StorefrontError, ValidationError):
    reason = "ProductNotFound"
    status_code = 400

    def __init__(self, product_id):
        self.product_id = str(product_id)
        self._init_messages(f"Product {self.product_id} not found", field="product_id")


class InsufficientStock(StorefrontError, InvalidOperationError):
    reason = "InsufficientStock"
    status_code = 409

    def __init__(self, product_id, requested: int, available: int, name: str | None = None):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        label = name or self.product_id
        self._init_messages(f"Not enough stock for {label}: requested {requested}, available {available}")


class StockConflict(StorefrontError, InvalidOperationError):
    """Another order changed the product's stock first; the caller may resubmit."""

    reason = "StockConflict"
    status_code = 409

    def __init__(self, product_id):
        self.product_id = str(product_id)
        self._init_messages(f"Stock for product {self.product_id} changed while placing the order, please retry")


class InvalidStatusTransition(StorefrontError, ValidationError):
    reason = "InvalidStatusTransition"
    status_code = 400

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        self._init_messages(f"Cannot transition from {current} to {target}", field="status")


class PersistenceFailure(StorefrontError):
    """The data store rejected or aborted the transaction. Nothing was written."""

    reason = "PersistenceFailure"
    status_code = 500

    def __init__(self, message: str = "The order could not be saved, please retry"):
        self._init_messages(message)


class WorkflowTimeout(StorefrontError):
    reason = "WorkflowTimeout"
    status_code = 503

    def __init__(self, message: str = "The request timed out waiting for the database, please retry"):
        self._init_messages(message)


class AuthenticationFailed(StorefrontError):
    reason = "AuthenticationFailed"
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        self._init_messages(message)


class PermissionDenied(StorefrontError):
    reason = "PermissionDenied"
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        self._init_messages(message)
