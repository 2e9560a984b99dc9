# backend/services/cart.py
"""Cart aggregate: one cart per user, line items keyed by product.

Totals are never stored; ``Cart.total_items`` and ``Cart.total_amount`` are
derived from the current lines on every read.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from models.cart import Cart, CartItem
from models.product import Product
from utils.errors import NotFoundError, InvalidError

logger = logging.getLogger(__name__)


def find_cart(db: Session, user_id: int) -> Optional[Cart]:
    return db.query(Cart).filter(Cart.user_id == user_id).first()


def get_or_create_cart(db: Session, user_id: int) -> Cart:
    # Carts are created lazily and never deleted
    cart = find_cart(db, user_id)
    if not cart:
        cart = Cart(user_id=user_id)
        db.add(cart)
        db.flush()
    return cart


def _require_cart(db: Session, user_id: int) -> Cart:
    cart = find_cart(db, user_id)
    if not cart:
        raise NotFoundError("Cart not found")
    return cart


def _available_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    if not product.is_available:
        raise InvalidError("Product is not available")
    return product


def stage_item(db: Session, cart: Cart, product_id: int, quantity: int) -> CartItem:
    """Merge ``quantity`` of a product into the cart without committing.

    The merged quantity is checked against current stock; on failure the
    existing line is left as it was.
    """
    product = _available_product(db, product_id)
    item = cart.find_item(product.id)
    merged = quantity + (item.quantity if item else 0)
    if merged > product.stock_quantity:
        raise InvalidError(f"Insufficient stock. Available: {product.stock_quantity}")

    if item:
        item.quantity = merged
        item.price = product.effective_price
    else:
        item = CartItem(product_id=product.id, quantity=merged, price=product.effective_price)
        cart.items.append(item)
    return item


def get_cart(db: Session, user_id: int) -> Cart:
    """Return the user's cart, dropping lines whose product vanished or is no longer active."""
    cart = get_or_create_cart(db, user_id)
    stale = [item for item in cart.items if item.product is None or not item.product.is_available]
    for item in stale:
        cart.items.remove(item)
    if stale:
        logger.info("Dropped %d unavailable items from cart %s", len(stale), cart.id)
    db.commit()
    db.refresh(cart)
    return cart


def add_item(db: Session, user_id: int, product_id: int, quantity: int) -> Cart:
    cart = get_or_create_cart(db, user_id)
    stage_item(db, cart, product_id, quantity)
    db.commit()
    db.refresh(cart)
    return cart


def update_item(db: Session, user_id: int, product_id: int, quantity: int) -> Cart:
    cart = _require_cart(db, user_id)
    item = cart.find_item(product_id)
    if not item:
        raise NotFoundError("Item not found in cart")

    product = _available_product(db, product_id)
    if quantity > product.stock_quantity:
        raise InvalidError(f"Insufficient stock. Available: {product.stock_quantity}")

    item.quantity = quantity
    item.price = product.effective_price
    db.commit()
    db.refresh(cart)
    return cart


def remove_item(db: Session, user_id: int, product_id: int) -> Cart:
    cart = _require_cart(db, user_id)
    item = cart.find_item(product_id)
    if not item:
        raise NotFoundError("Item not found in cart")

    cart.items.remove(item)
    db.commit()
    db.refresh(cart)
    return cart


def clear_cart(db: Session, user_id: int) -> Cart:
    cart = _require_cart(db, user_id)
    cart.items.clear()
    db.commit()
    db.refresh(cart)
    return cart


def sync_prices(db: Session, user_id: int) -> Tuple[Cart, str]:
    cart = get_or_create_cart(db, user_id)
    if not cart.items:
        db.commit()
        return cart, "Cart is empty"

    updated = False
    for item in cart.items:
        product = db.get(Product, item.product_id)
        if product and product.is_available and item.price != product.effective_price:
            item.price = product.effective_price
            updated = True

    db.commit()
    db.refresh(cart)
    return cart, "Cart prices updated" if updated else "Cart prices are up to date"


def cart_summary(db: Session, user_id: int) -> dict:
    cart = find_cart(db, user_id)
    if not cart:
        return {"total_items": 0, "total_amount": 0, "items_count": 0}
    return {
        "total_items": cart.total_items,
        "total_amount": cart.total_amount,
        "items_count": len(cart.items),
    }
