"""Product persistence: catalogue reads and the inventory ledger.

Stock changes go through the DAO's bulk ``_update_all`` with criteria that
include the stock value the caller observed. On SQL providers that is a single
``UPDATE products SET stock = :new WHERE id = :id AND stock = :expected``,
so the guard and the write are one statement and the affected-row count
tells whether another transaction got there first.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from protean.utils.query import Q

from storefront.catalogue.product import Product, ProductStatus
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Attempts made by ``release`` before giving up on a contended row
RELEASE_ATTEMPTS = 5


@dataclass(frozen=True)
class ProductSnapshot:
    """What order placement needs to know about a product at one instant."""

    product_id: str
    name: str
    price: Decimal
    stock: int


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_active(self, product_id) -> Product | None:
        items = self._dao.query.filter(id=str(product_id), status=ProductStatus.ACTIVE.value).limit(1).all().items
        return items[0] if items else None

    def snapshot(self, product_id) -> ProductSnapshot | None:
        """Read the current price and stock of an active product, or ``None``."""
        product = self.find_active(product_id)
        if product is None:
            return None
        return ProductSnapshot(
            product_id=str(product.id),
            name=product.name,
            price=Decimal(product.price),
            stock=product.stock,
        )

    def reserve(self, product_id, quantity: int, expected_stock: int) -> bool:
        """Decrement stock by ``quantity`` only if it still equals ``expected_stock``.

        Returns ``False`` when the guard does not match (someone else changed
        the stock) or when the decrement would go below zero.
        """
        if quantity < 1 or expected_stock < quantity:
            return False

        updated = self._dao._update_all(
            Q(id=str(product_id), status=ProductStatus.ACTIVE.value, stock=expected_stock),
            stock=expected_stock - quantity,
            updated_at=datetime.now(UTC),
        )
        if updated != 1:
            logger.warning(
                "stock_guard_failed",
                product_id=str(product_id),
                quantity=quantity,
                expected_stock=expected_stock,
            )
            return False
        return True

    def decrement_stock_if_at_least(self, product_id, quantity: int) -> bool:
        """Decrement stock if at least ``quantity`` units are available right now."""
        snapshot = self.snapshot(product_id)
        if snapshot is None or snapshot.stock < quantity:
            return False
        return self.reserve(product_id, quantity, snapshot.stock)

    def release(self, product_id, quantity: int) -> bool:
        """Return ``quantity`` units to stock.

        Removed products still get their units back so the ledger stays
        balanced if the product is restored later.
        """
        for _ in range(RELEASE_ATTEMPTS):
            items = self._dao.query.filter(id=str(product_id)).limit(1).all().items
            if not items:
                logger.warning("stock_release_skipped", product_id=str(product_id), reason="missing")
                return False

            current = items[0].stock
            updated = self._dao._update_all(
                Q(id=str(product_id), stock=current),
                stock=current + quantity,
                updated_at=datetime.now(UTC),
            )
            if updated == 1:
                return True

        logger.error("stock_release_failed", product_id=str(product_id), quantity=quantity)
        return False
