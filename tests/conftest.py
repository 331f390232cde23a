import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported.

    bcrypt's minimum cost keeps password hashing fast under test.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("BCRYPT_ROUNDS", "4")
    os.environ.setdefault("JWT_SECRET", "test-secret-for-electrostore-tokens")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Run every test in the domain context and wipe stores afterwards."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture
def add_product():
    """Factory: add a product through the AddProduct command and return its id."""
    from protean import current_domain

    from storefront.catalogue.management import AddProduct

    def _add(**overrides):
        values = {
            "name": "4K Monitor",
            "price": "1000.00",
            "category": "Displays",
            "stock": 5,
            "brand": "Visionix",
        }
        values.update(overrides)
        return current_domain.process(AddProduct(**values), asynchronous=False)

    return _add


@pytest.fixture
def stock_of():
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _stock(product_id):
        return current_domain.repository_for(Product).get(product_id).stock

    return _stock


@pytest.fixture
def register():
    """Factory: register a shopper and return the user id."""
    from storefront.identity.registration import register_user

    counter = {"n": 0}

    def _register(email=None, password="secret-pass", **extra):
        counter["n"] += 1
        return register_user(email=email or f"shopper{counter['n']}@example.com", password=password, **extra)

    return _register


@pytest.fixture
def client():
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from storefront.api import mount

    return TestClient(mount(FastAPI()))


@pytest.fixture
def shopper_headers(client):
    """Factory: register and log in a shopper over HTTP, returning auth headers."""
    counter = {"n": 0}

    def _headers(email=None, password="secret-pass"):
        counter["n"] += 1
        email = email or f"api-shopper{counter['n']}@example.com"
        client.post("/api/register", json={"email": email, "password": password})
        response = client.post("/api/login", json={"email": email, "password": password})
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _headers


@pytest.fixture
def main_admin_headers(client):
    """Seed the main admin and log in over HTTP with a first-time security key."""
    from storefront.identity.registration import seed_main_admin
    from storefront.settings import get_settings

    seed_main_admin()
    settings = get_settings()
    response = client.post(
        "/api/admin/login",
        json={
            "email": settings.main_admin_email,
            "password": settings.main_admin_password,
            "securityKey": "main-key-001",
        },
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}
