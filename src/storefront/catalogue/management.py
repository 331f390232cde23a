"""Catalogue management: admins add, edit and withdraw products."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import EDITABLE_FIELDS, Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    price = String(required=True, max_length=20)
    category = String(required=True, max_length=100)
    stock = Integer(default=0, min_value=0)
    description = Text()
    image_url = String(max_length=500)
    brand = String(max_length=100)
    featured = Boolean(default=False)
    added_by = Identifier()


@storefront.command(part_of="Product")
class UpdateProduct:
    """Partial update: only fields that are set are changed."""

    product_id = Identifier(required=True)
    name = String(max_length=255)
    price = String(max_length=20)
    category = String(max_length=100)
    stock = Integer(min_value=0)
    description = Text()
    image_url = String(max_length=500)
    brand = String(max_length=100)
    featured = Boolean()
    updated_by = Identifier()


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)
    removed_by = Identifier()


def _active_product(repo, product_id) -> Product:
    product = repo.find_active(product_id)
    if product is None:
        raise ObjectNotFoundError(f"Product with id {product_id} does not exist")
    return product


@storefront.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            name=command.name,
            price=command.price,
            category=command.category,
            stock=command.stock or 0,
            description=command.description,
            image_url=command.image_url,
            brand=command.brand,
            featured=command.featured,
            added_by=command.added_by,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _active_product(repo, command.product_id)

        changes = {
            field_name: getattr(command, field_name)
            for field_name in EDITABLE_FIELDS
            if getattr(command, field_name) is not None
        }
        product.update_details(changes, updated_by=command.updated_by)
        repo.add(product)
        return str(product.id)

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = _active_product(repo, command.product_id)
        product.remove(removed_by=command.removed_by)
        repo.add(product)
        return str(product.id)
