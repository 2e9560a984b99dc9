# backend/services/wishlist.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from models.product import Product
from models.wishlist import Wishlist, WishlistItem
from services import cart as cart_service
from utils.errors import NotFoundError, InvalidError, ConflictError

logger = logging.getLogger(__name__)


def find_wishlist(db: Session, user_id: int) -> Optional[Wishlist]:
    return db.query(Wishlist).filter(Wishlist.user_id == user_id).first()


def _get_or_create(db: Session, user_id: int) -> Wishlist:
    wishlist = find_wishlist(db, user_id)
    if not wishlist:
        wishlist = Wishlist(user_id=user_id)
        db.add(wishlist)
        db.flush()
    return wishlist


def _require(db: Session, user_id: int) -> Wishlist:
    wishlist = find_wishlist(db, user_id)
    if not wishlist:
        raise NotFoundError("Wishlist not found")
    return wishlist


def get_wishlist(db: Session, user_id: int) -> Wishlist:
    wishlist = _get_or_create(db, user_id)
    for item in [i for i in wishlist.items if i.product is None or not i.product.is_available]:
        wishlist.items.remove(item)
    db.commit()
    db.refresh(wishlist)
    return wishlist


def add_item(db: Session, user_id: int, product_id: int) -> Wishlist:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    if not product.is_available:
        raise InvalidError("Product is not available")

    wishlist = _get_or_create(db, user_id)
    if wishlist.find_item(product_id):
        raise ConflictError("Product already exists in wishlist")
    wishlist.items.append(WishlistItem(product_id=product_id))
    db.commit()
    db.refresh(wishlist)
    return wishlist


def remove_item(db: Session, user_id: int, product_id: int) -> Wishlist:
    wishlist = _require(db, user_id)
    item = wishlist.find_item(product_id)
    if not item:
        raise NotFoundError("Item not found in wishlist")
    wishlist.items.remove(item)
    db.commit()
    db.refresh(wishlist)
    return wishlist


def clear_wishlist(db: Session, user_id: int) -> Wishlist:
    wishlist = _require(db, user_id)
    wishlist.items.clear()
    db.commit()
    db.refresh(wishlist)
    return wishlist


def is_in_wishlist(db: Session, user_id: int, product_id: int) -> bool:
    wishlist = find_wishlist(db, user_id)
    return bool(wishlist and wishlist.find_item(product_id))


def wishlist_summary(db: Session, user_id: int) -> dict:
    wishlist = find_wishlist(db, user_id)
    return {"total_items": len(wishlist.items) if wishlist else 0}


def move_to_cart(db: Session, user_id: int, product_id: int, quantity: int = 1) -> dict:
    """Move a saved product into the cart; both writes share one commit."""
    wishlist = _require(db, user_id)
    item = wishlist.find_item(product_id)
    if not item:
        raise NotFoundError("Item not found in wishlist")

    product = db.get(Product, product_id)
    if not product or not product.is_available:
        raise InvalidError("Product is not available")
    if quantity > product.stock_quantity:
        raise InvalidError(f"Only {product.stock_quantity} items available in stock")

    cart = cart_service.get_or_create_cart(db, user_id)
    cart_service.stage_item(db, cart, product_id, quantity)
    wishlist.items.remove(item)
    db.commit()
    db.refresh(cart)
    db.refresh(wishlist)
    logger.info("User %s moved product %s from wishlist to cart", user_id, product_id)
    return {"cart": cart, "wishlist": wishlist}
