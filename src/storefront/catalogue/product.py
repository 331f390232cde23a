"""Product aggregate: a sellable item with a price and a stock count.

Products are never hard-deleted. Removal flips ``status`` to ``removed``,
which hides the product from the catalogue and from order placement while
order line items keep pointing at it.

``stock`` is changed through the guarded updates in
:class:`storefront.catalogue.repository.ProductRepository`, never by
read-modify-write on a loaded aggregate, so concurrent orders cannot both
spend the same units.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text

from storefront.catalogue.events import ProductAdded, ProductRemoved, ProductUpdated
from storefront.domain import storefront
from storefront.shared.money import format_amount, parse_amount


class ProductStatus(Enum):
    ACTIVE = "active"
    REMOVED = "removed"


# Details an admin may edit after creation
EDITABLE_FIELDS = ("name", "description", "price", "image_url", "stock", "category", "brand", "featured")


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = String(required=True, max_length=20)  # canonical 2-dp decimal string
    image_url = String(max_length=500)
    stock = Integer(default=0)
    category = String(required=True, max_length=100)
    brand = String(max_length=100)
    featured = Boolean(default=False)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @invariant.post
    def price_must_be_a_positive_amount(self):
        parse_amount(self.price, field="price")

    @property
    def unit_price(self) -> Decimal:
        return Decimal(self.price)

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @classmethod
    def add(
        cls,
        name,
        price,
        category,
        stock=0,
        description=None,
        image_url=None,
        brand=None,
        featured=False,
        added_by=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=format_amount(parse_amount(price)),
            image_url=image_url,
            stock=stock,
            category=category,
            brand=brand,
            featured=bool(featured),
            status=ProductStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock=product.stock,
                category=product.category,
                added_by=added_by,
                added_at=now,
            )
        )
        return product

    def update_details(self, changes: dict, updated_by=None):
        """Apply the given field changes. Unknown fields are rejected, unchanged ones ignored."""
        if not self.is_active:
            raise ValidationError({"product": ["Removed products cannot be edited"]})

        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError({"product": [f"Unknown fields: {', '.join(unknown)}"]})

        if "price" in changes:
            changes = {**changes, "price": format_amount(parse_amount(changes["price"]))}
        if changes.get("stock") is not None and changes["stock"] < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        applied = {}
        for field_name, value in changes.items():
            if getattr(self, field_name) != value:
                setattr(self, field_name, value)
                applied[field_name] = value

        if not applied:
            return

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                changes=json.dumps(applied),
                updated_by=updated_by,
                updated_at=now,
            )
        )

    def remove(self, removed_by=None):
        if not self.is_active:
            raise ValidationError({"product": ["Product is already removed"]})

        now = datetime.now(UTC)
        self.status = ProductStatus.REMOVED.value
        self.updated_at = now
        self.raise_(
            ProductRemoved(
                product_id=str(self.id),
                name=self.name,
                removed_by=removed_by,
                removed_at=now,
            )
        )
