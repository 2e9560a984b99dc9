"""Shared fixtures: a fresh in-memory database per test, factories and an API client."""
import itertools
import os
import tempfile

# Must be set before the application modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="shop-uploads-")
os.environ["SMTP_HOST"] = ""

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, engine, SessionLocal
from models.address import Address
from models.category import Category
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import tokens_for

PASSWORD = "password123"
PASSWORD_HASH = get_password_hash(PASSWORD)

_seq = itertools.count(1)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(role="customer", email=None, name="Test User", status="active"):
        n = next(_seq)
        user = User(
            name=name,
            email=email or f"user{n}@example.com",
            password_hash=PASSWORD_HASH,
            role=role,
            status=status,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", name="Admin")


@pytest.fixture
def category(db):
    cat = Category(name="Electronics", description="Devices")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def make_product(db, category):
    def _make(price=100.0, stock=10, discount_price=None, status="active", name=None, images=None):
        n = next(_seq)
        product = Product(
            name=name or f"Product {n}",
            sku=f"SKU{n:04d}",
            description="A product used in tests",
            price=price,
            discount_price=discount_price,
            stock_quantity=stock,
            status=status,
            category_id=category.id,
            images=images or [],
            tags=[],
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_address(db):
    def _make(user, is_default=False, city="Pune"):
        address = Address(
            user_id=user.id,
            address_line1="12 MG Road",
            city=city,
            state="Maharashtra",
            pincode="411001",
            country="India",
            phone="9876543210",
            is_default=is_default,
        )
        db.add(address)
        db.commit()
        db.refresh(address)
        return address
    return _make


def auth_headers(user) -> dict:
    access_token, _ = tokens_for(user)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def auth_for():
    return auth_headers
