from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from main import create_app
from storefront_admin.core.config import Settings
from storefront_admin.core.database import Database
from storefront_admin.core.migrate import run_migrations
from storefront_admin.models.database import Category, Customer, Product


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test_storefront.db'}"


@pytest.fixture
def database(database_url):
    database = Database(database_url)
    run_migrations(database.engine)
    yield database
    database.close()


@pytest.fixture
def test_db(database):
    with database.session() as db:
        yield db


@pytest.fixture
def client(database, database_url):
    app = create_app(Settings(database_url=database_url), database=database)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sample_catalog(test_db):
    """One customer, two categories and three products"""
    mixers = Category(name="Mixers", description="DJ mixers")
    headphones = Category(name="Headphones", description="Studio headphones")
    test_db.add_all([mixers, headphones])
    test_db.flush()

    products = [
        Product(name="Club Mixer", price=Decimal("299.99"), stock_quantity=10, category_id=mixers.id, sku="MX-1"),
        Product(name="Closed Headphones", price=Decimal("29.99"), stock_quantity=5, category_id=headphones.id, sku="HP-1"),
        Product(name="Cable Set", price=Decimal("9.50"), stock_quantity=3, sku="CB-1"),
    ]
    customer = Customer(name="Ada Lovelace", email="ada@example.com", phone="555-0100")
    test_db.add_all(products + [customer])
    test_db.commit()

    return {
        "categories": [mixers, headphones],
        "products": products,
        "customer": customer,
    }
