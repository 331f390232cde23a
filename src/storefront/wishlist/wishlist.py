"""Wishlist aggregate: products a customer wants to keep an eye on."""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier

from storefront.domain import storefront


@storefront.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    added_at = DateTime()


@storefront.aggregate
class Wishlist:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(WishlistItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def _find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add_product(self, product_id) -> bool:
        """Add a product. Returns ``False`` if it was already listed."""
        if self._find(product_id) is not None:
            return False

        now = datetime.now(UTC)
        self.add_items(WishlistItem(product_id=product_id, added_at=now))
        self.updated_at = now
        return True

    def remove_product(self, product_id) -> bool:
        item = self._find(product_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        return True
