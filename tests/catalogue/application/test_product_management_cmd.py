"""Application tests for catalogue management commands."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from storefront.backoffice.activity import ActivityLogEntry
from storefront.catalogue.management import RemoveProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.shared.queries import fetch_all


class TestAddProduct:
    def test_product_is_persisted(self, add_product):
        product_id = add_product(name="Tablet", price="349.5", stock=7)

        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Tablet"
        assert product.price == "349.50"
        assert product.stock == 7

    def test_addition_is_logged(self, add_product):
        product_id = add_product(added_by="admin-001")

        entries = fetch_all(ActivityLogEntry, action_type="Product Added")
        assert len(entries) == 1
        assert json.loads(entries[0].details)["product_id"] == product_id


class TestUpdateProduct:
    def test_partial_update(self, add_product):
        product_id = add_product(name="Tablet", stock=7)

        current_domain.process(UpdateProduct(product_id=product_id, stock=12), asynchronous=False)

        product = current_domain.repository_for(Product).get(product_id)
        assert product.stock == 12
        assert product.name == "Tablet"

    def test_update_is_logged_with_changes(self, add_product):
        product_id = add_product()

        current_domain.process(
            UpdateProduct(product_id=product_id, price="10.00", updated_by="admin-002"),
            asynchronous=False,
        )

        entries = fetch_all(ActivityLogEntry, action_type="Product Updated")
        assert len(entries) == 1
        assert json.loads(entries[0].details)["changes"] == {"price": "10.00"}

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateProduct(product_id="nope", stock=1), asynchronous=False)


class TestRemoveProduct:
    def test_removed_product_is_kept_but_hidden(self, add_product):
        product_id = add_product()

        current_domain.process(RemoveProduct(product_id=product_id, removed_by="admin-001"), asynchronous=False)

        product = current_domain.repository_for(Product).get(product_id)
        assert product.status == "removed"
        assert current_domain.repository_for(Product).find_active(product_id) is None
        assert len(fetch_all(ActivityLogEntry, action_type="Product Deleted")) == 1

    def test_removed_product_cannot_be_updated(self, add_product):
        product_id = add_product()
        current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateProduct(product_id=product_id, stock=1), asynchronous=False)
