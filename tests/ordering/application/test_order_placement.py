"""Application tests for the order placement workflow via domain.process()."""

import json
from decimal import Decimal

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from sqlalchemy.exc import OperationalError

from storefront.catalogue.management import RemoveProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.repository import ProductRepository
from storefront.ordering.order import Order, OrderStatus
from storefront.ordering.placement import PlaceOrder, parse_lines, submit_order
from storefront.shared.errors import (
    InsufficientStock,
    PersistenceFailure,
    ProductNotFound,
    StockConflict,
    WorkflowTimeout,
)
from storefront.shared.queries import fetch_all


def _command(items, **overrides):
    values = {
        "user_id": "user-001",
        "items": json.dumps([{"product_id": pid, "quantity": qty} for pid, qty in items]),
        "customer_name": "Ada Lovelace",
        "delivery_address": "12 Analytical Row, London",
        "contact_number": "555-0100",
    }
    values.update(overrides)
    return PlaceOrder(**values)


def _place(items, **overrides):
    return current_domain.process(_command(items, **overrides), asynchronous=False)


def _orders():
    return fetch_all(Order)


class TestSuccessfulPlacement:
    def test_order_decrements_stock_and_totals(self, add_product, stock_of):
        product_id = add_product(price="1000.00", stock=5)

        order_id = _place([(product_id, 3)])

        order = current_domain.repository_for(Order).get(order_id)
        assert order.total == "3000.00"
        assert order.status == OrderStatus.PENDING.value
        assert len(order.items) == 1
        assert order.items[0].quantity == 3
        assert order.items[0].price_at_time_of_order == "1000.00"
        assert stock_of(product_id) == 2

    def test_multi_line_order(self, add_product, stock_of):
        monitor = add_product(name="Monitor", price="199.99", stock=4)
        cable = add_product(name="HDMI Cable", price="9.50", stock=10)

        order_id = _place([(monitor, 2), (cable, 3)])

        order = current_domain.repository_for(Order).get(order_id)
        assert Decimal(order.total) == Decimal("199.99") * 2 + Decimal("9.50") * 3
        assert stock_of(monitor) == 2
        assert stock_of(cable) == 7

    def test_whole_stock_can_be_bought(self, add_product, stock_of):
        product_id = add_product(stock=2)
        _place([(product_id, 2)])
        assert stock_of(product_id) == 0

    def test_repeated_product_lines_are_merged(self, add_product, stock_of):
        product_id = add_product(price="10.00", stock=5)

        order_id = _place([(product_id, 1), (product_id, 2)])

        order = current_domain.repository_for(Order).get(order_id)
        assert len(order.items) == 1
        assert order.items[0].quantity == 3
        assert order.total == "30.00"
        assert stock_of(product_id) == 2

    def test_delivery_fields_are_trimmed(self, add_product):
        product_id = add_product()
        order_id = _place([(product_id, 1)], customer_name="  Ada  ")
        assert current_domain.repository_for(Order).get(order_id).customer_name == "Ada"

    def test_captured_price_survives_price_change(self, add_product):
        product_id = add_product(price="1000.00", stock=5)
        order_id = _place([(product_id, 1)])

        current_domain.process(UpdateProduct(product_id=product_id, price="1500.00"), asynchronous=False)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.total == "1000.00"
        assert order.items[0].price_at_time_of_order == "1000.00"


class TestRejectedRequests:
    def test_unknown_product_creates_nothing(self, add_product, stock_of):
        known = add_product(stock=5)

        with pytest.raises(ProductNotFound):
            _place([(known, 1), ("does-not-exist", 1)])

        assert _orders() == []
        assert stock_of(known) == 5

    def test_removed_product_is_not_found(self, add_product):
        product_id = add_product()
        current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)

        with pytest.raises(ProductNotFound):
            _place([(product_id, 1)])

    def test_quantity_above_stock_is_insufficient(self, add_product, stock_of):
        product_id = add_product(stock=5)

        with pytest.raises(InsufficientStock) as exc:
            _place([(product_id, 10)])

        assert exc.value.requested == 10
        assert exc.value.available == 5
        assert _orders() == []
        assert stock_of(product_id) == 5

    def test_merged_quantity_is_checked_against_stock(self, add_product, stock_of):
        product_id = add_product(stock=5)

        with pytest.raises(InsufficientStock):
            _place([(product_id, 3), (product_id, 3)])

        assert stock_of(product_id) == 5

    @pytest.mark.parametrize("field", ["customer_name", "delivery_address", "contact_number"])
    def test_blank_delivery_field_is_rejected(self, add_product, stock_of, field):
        product_id = add_product(stock=5)

        with pytest.raises(ValidationError) as exc:
            _place([(product_id, 1)], **{field: "   "})

        assert field in exc.value.messages
        assert _orders() == []
        assert stock_of(product_id) == 5

    def test_zero_quantity_is_rejected(self, add_product):
        product_id = add_product()
        with pytest.raises(ValidationError):
            _place([(product_id, 0)])

    def test_empty_item_list_is_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(_command([]), asynchronous=False)


class TestAtomicity:
    def test_failed_reservation_rolls_back_everything(self, add_product, stock_of, monkeypatch):
        first = add_product(name="Keyboard", stock=5)
        second = add_product(name="Mouse", stock=5)
        original_reserve = ProductRepository.reserve

        def reserve_failing_on_second(self, product_id, quantity, expected_stock):
            if str(product_id) == second:
                return False
            return original_reserve(self, product_id, quantity, expected_stock)

        monkeypatch.setattr(ProductRepository, "reserve", reserve_failing_on_second)

        with pytest.raises(StockConflict):
            _place([(first, 2), (second, 1)])

        assert _orders() == []
        assert stock_of(first) == 5
        assert stock_of(second) == 5

    def test_lost_race_is_a_stock_conflict(self, add_product, stock_of, monkeypatch):
        """Two shoppers both see stock=5 and ask for 3 each; only the first may win."""
        product_id = add_product(stock=5)
        stale = current_domain.repository_for(Product).snapshot(product_id)

        first_order = _place([(product_id, 3)], user_id="user-first")
        assert stock_of(product_id) == 2

        # The second request read its snapshot before the first committed
        monkeypatch.setattr(ProductRepository, "snapshot", lambda self, pid: stale)

        with pytest.raises(StockConflict):
            _place([(product_id, 3)], user_id="user-second")

        monkeypatch.undo()
        assert stock_of(product_id) == 2
        assert [str(o.id) for o in _orders()] == [first_order]

    def test_sequential_orders_never_oversell(self, add_product, stock_of):
        product_id = add_product(stock=5)

        _place([(product_id, 3)], user_id="user-a")
        with pytest.raises(InsufficientStock):
            _place([(product_id, 3)], user_id="user-b")

        assert stock_of(product_id) == 2
        assert len(_orders()) == 1


class TestIdempotency:
    def test_same_key_returns_the_same_order(self, add_product, stock_of):
        product_id = add_product(stock=5)

        first = _place([(product_id, 2)], idempotency_key="checkout-42")
        second = _place([(product_id, 2)], idempotency_key="checkout-42")

        assert first == second
        assert len(_orders()) == 1
        assert stock_of(product_id) == 3

    def test_keys_are_scoped_per_user(self, add_product):
        product_id = add_product(stock=5)

        first = _place([(product_id, 1)], idempotency_key="k", user_id="user-a")
        second = _place([(product_id, 1)], idempotency_key="k", user_id="user-b")

        assert first != second


class TestSubmitOrder:
    def test_returns_order_id(self, add_product):
        product_id = add_product()
        order_id = submit_order(_command([(product_id, 1)]))
        assert current_domain.repository_for(Order).get(order_id)

    def test_domain_errors_pass_through(self, add_product):
        product_id = add_product(stock=1)
        with pytest.raises(InsufficientStock):
            submit_order(_command([(product_id, 2)]))

    def test_statement_timeout_becomes_workflow_timeout(self, add_product, stock_of, monkeypatch):
        product_id = add_product(stock=5)

        def timing_out(self, *args, **kwargs):
            raise OperationalError("UPDATE product", {}, Exception("canceling statement due to statement timeout"))

        monkeypatch.setattr(ProductRepository, "reserve", timing_out)

        with pytest.raises(WorkflowTimeout):
            submit_order(_command([(product_id, 1)]))

        assert _orders() == []
        assert stock_of(product_id) == 5

    def test_storage_failure_becomes_persistence_failure(self, add_product, monkeypatch):
        product_id = add_product(stock=5)

        def connection_lost(self, *args, **kwargs):
            raise OperationalError("UPDATE product", {}, Exception("server closed the connection unexpectedly"))

        monkeypatch.setattr(ProductRepository, "reserve", connection_lost)

        with pytest.raises(PersistenceFailure):
            submit_order(_command([(product_id, 1)]))

        assert _orders() == []


class TestParseLines:
    def test_merges_duplicates_in_first_seen_order(self):
        raw = json.dumps(
            [
                {"product_id": "b", "quantity": 1},
                {"product_id": "a", "quantity": 2},
                {"product_id": "b", "quantity": 4},
            ]
        )
        assert parse_lines(raw) == [("b", 5), ("a", 2)]

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            json.dumps({"product_id": "a"}),
            json.dumps([]),
            json.dumps([{"quantity": 1}]),
            json.dumps([{"product_id": "a", "quantity": "2"}]),
            json.dumps([{"product_id": "a", "quantity": True}]),
            json.dumps([{"product_id": "a", "quantity": -1}]),
        ],
    )
    def test_malformed_items_are_rejected(self, raw):
        with pytest.raises(ValidationError):
            parse_lines(raw)
