"""Pytest fixtures for the storefront API tests."""

from decimal import Decimal

import pytest

from app import create_app
from config import TestConfig
from models import db, Product
from services import issue_token, register_user

PASSWORD = "Secret#123"


@pytest.fixture
def app(tmp_path):
    """App bound to a throwaway SQLite file (threads need a real file, not :memory:)."""

    class Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'storefront.db'}"

    app = create_app(Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def customer(app):
    return register_user("alice", "alice@example.com", PASSWORD)


@pytest.fixture
def admin(app):
    return register_user("root", "root@example.com", PASSWORD, role="admin")


@pytest.fixture
def customer_headers(customer):
    return {"Authorization": f"Bearer {issue_token(customer)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {issue_token(admin)}"}


@pytest.fixture
def make_product(admin):
    """Factory for products owned by the admin fixture."""

    def _make(name="Party Bag", price="9.99", stock=5, category="Bags"):
        product = Product(
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            stock=stock,
            category=category,
            user_id=admin.id,
        )
        db.session.add(product)
        db.session.commit()
        return product

    return _make
