"""
Pytest fixtures for Mr. Chooks backend tests.

Provides test database setup, a small seeded catalog, and test client.
"""

import pytest

from mrchooks import create_app
from mrchooks.extensions import db
from mrchooks.models import Product, InventoryRecord


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'MISSING_INVENTORY_POLICY': 'skip',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_product(session, product_id, name, price_cents, cost_cents=0, stock=None):
    """Add a product (and an inventory row when stock is given)."""
    product = Product(id=product_id, name=name, price_cents=price_cents, cost_cents=cost_cents)
    session.add(product)
    if stock is not None:
        session.add(InventoryRecord(product_id=product_id, beginning=stock, stock=stock))
    session.commit()
    return product


@pytest.fixture(scope='function')
def catalog(db_session):
    """
    p1: Whole Chicken @ 50.00 (cost 30.00), 10 in stock
    p2: Liempo @ 100.00 (cost 70.00), 5 in stock
    p3: Gravy @ 15.00, no inventory row
    """
    return {
        "p1": make_product(db_session, "p1", "Whole Chicken", 5000, 3000, stock=10),
        "p2": make_product(db_session, "p2", "Liempo", 10000, 7000, stock=5),
        "p3": make_product(db_session, "p3", "Gravy", 1500),
    }


def stock_of(product_id):
    row = db.session.query(InventoryRecord).filter_by(product_id=product_id).first()
    if row is None:
        return None
    db.session.refresh(row)
    return row.stock


@pytest.fixture(name="stock_of")
def stock_of_fixture(db_session):
    """Current stock for a product id (None when it has no inventory row)."""
    return stock_of
