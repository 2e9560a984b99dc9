"""Seed a development database with an admin, a few customers, categories and products.

Run from the backend/ directory: ``python populate_db.py``. Existing users,
categories and products are kept; rows are only added when missing.
"""
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.category import Category
from models.product import Product
from models.users import User, UserRole
from utils.hashing import get_password_hash

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@ecommerce.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

SAMPLE_USERS = [
    ("Admin User", ADMIN_EMAIL, ADMIN_PASSWORD, UserRole.ADMIN.value),
    ("John Doe", "john@example.com", "password123", UserRole.CUSTOMER.value),
    ("Jane Smith", "jane@example.com", "password123", UserRole.CUSTOMER.value),
]

SAMPLE_CATEGORIES = [
    ("Electronics", "Electronic devices and gadgets"),
    ("Clothing", "Fashion and apparel"),
    ("Home & Garden", "Home improvement and garden supplies"),
    ("Books", "Books and educational materials"),
    ("Sports & Fitness", "Sports equipment and fitness gear"),
]

# (category, name, sku, description, price, discount_price, stock, featured, specifications)
SAMPLE_PRODUCTS = [
    ("Electronics", "Smartphone Pro Max", "SPM001", "Latest smartphone with advanced features",
     79999, 74999, 50, True, {"Display": "6.7 inch OLED", "Storage": "256GB", "RAM": "8GB"}),
    ("Electronics", "Wireless Headphones", "WH001", "Premium wireless headphones with noise cancellation",
     15999, 12999, 100, True, None),
    ("Clothing", "Cotton T-Shirt", "CTS001", "Comfortable cotton t-shirt for daily wear",
     799, None, 200, False, None),
    ("Home & Garden", "Laptop Backpack", "LB001", "Durable laptop backpack with multiple compartments",
     2499, 1999, 75, False, None),
    ("Sports & Fitness", "Fitness Tracker", "FT001", "Smart fitness tracker with heart rate monitor",
     4999, 3999, 80, True, None),
]


def seed_users(session):
    for name, email, password, role in SAMPLE_USERS:
        if session.query(User).filter(User.email == email).first():
            continue
        session.add(User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=role,
            is_email_verified=True,
        ))
    session.flush()


def seed_catalog(session):
    categories = {}
    for name, description in SAMPLE_CATEGORIES:
        category = session.query(Category).filter(Category.name == name).first()
        if not category:
            category = Category(name=name, description=description)
            session.add(category)
            session.flush()
        categories[name] = category

    for category, name, sku, description, price, discount, stock, featured, specs in SAMPLE_PRODUCTS:
        if session.query(Product).filter(Product.sku == sku).first():
            continue
        session.add(Product(
            name=name,
            sku=sku,
            description=description,
            price=price,
            discount_price=discount,
            stock_quantity=stock,
            featured=featured,
            specifications=specs,
            category_id=categories[category].id,
            images=[],
            tags=[],
        ))


def populate_database():
    """Main execution function to populate database."""
    init_db()
    session = SessionLocal()
    try:
        seed_users(session)
        seed_catalog(session)
        session.commit()
        print(f"Seeded {len(SAMPLE_CATEGORIES)} categories and {len(SAMPLE_PRODUCTS)} products.")
        print(f"Admin login: {ADMIN_EMAIL}")
    finally:
        session.close()


if __name__ == "__main__":
    populate_database()
