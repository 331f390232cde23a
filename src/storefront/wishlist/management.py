"""Wishlist commands and reads."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.browsing import product_view
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import ProductNotFound
from storefront.shared.queries import fetch_first
from storefront.wishlist.wishlist import Wishlist


@storefront.command(part_of="Wishlist")
class AddToWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class RemoveFromWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


def find_wishlist(user_id) -> Wishlist | None:
    return fetch_first(Wishlist, user_id=str(user_id))


@storefront.command_handler(part_of=Wishlist)
class WishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        if current_domain.repository_for(Product).find_active(command.product_id) is None:
            raise ProductNotFound(command.product_id)

        wishlist = find_wishlist(command.user_id) or Wishlist.create(command.user_id)
        if wishlist.add_product(command.product_id):
            current_domain.repository_for(Wishlist).add(wishlist)
        return str(wishlist.id)

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        wishlist = find_wishlist(command.user_id)
        if wishlist is None:
            return None
        if wishlist.remove_product(command.product_id):
            current_domain.repository_for(Wishlist).add(wishlist)
        return str(wishlist.id)


def wishlist_view(user_id) -> dict:
    """The user's wishlist with current product details. Removed products are left out."""
    wishlist = find_wishlist(user_id)
    products = current_domain.repository_for(Product)

    items = sorted(wishlist.items, key=lambda i: i.added_at, reverse=True) if wishlist else []

    entries = []
    for item in items:
        product = products.find_active(item.product_id)
        if product is not None:
            entries.append({"added_at": item.added_at, "product": product_view(product)})

    return {"user_id": str(user_id), "items": entries}
