"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """An admin added a product to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = String(required=True)
    stock = Integer(required=True)
    category = String(required=True)
    added_by = Identifier()
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUpdated:
    """An admin changed one or more product details."""

    __version__ = 1

    product_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: {"field": new_value}
    updated_by = Identifier()
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRemoved:
    """An admin withdrew a product from sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    removed_by = Identifier()
    removed_at = DateTime(required=True)
