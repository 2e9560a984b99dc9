# backend/routes/cart.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartSummary
from schemas.common import ApiResponse, ok
from services import cart as cart_service
from utils.audit import write_log
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])


def _log(db: Session, request: Request, user: User, action: str, cart, **meta):
    write_log(
        db,
        user_id=user.id,
        action=action,
        resource="cart",
        request=request,
        meta={**meta, "cart_items": len(cart.items), "total": cart.total_amount},
    )


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(cart_service.get_cart(db, current_user.id), "Cart fetched successfully")


@router.get("/summary", response_model=ApiResponse[CartSummary])
def cart_summary(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(cart_service.cart_summary(db, current_user.id), "Cart summary fetched successfully")


@router.post("/add", response_model=ApiResponse[CartOut])
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = cart_service.add_item(db, current_user.id, payload.product_id, payload.quantity)
    _log(db, request, current_user, "CART_ADD", cart, product_id=payload.product_id, qty=payload.quantity)
    return ok(cart, "Item added to cart successfully")


@router.put("/update", response_model=ApiResponse[CartOut])
def update_cart_item(
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = cart_service.update_item(db, current_user.id, payload.product_id, payload.quantity)
    _log(db, request, current_user, "CART_UPDATE", cart, product_id=payload.product_id, qty=payload.quantity)
    return ok(cart, "Cart updated successfully")


@router.delete("/remove/{product_id}", response_model=ApiResponse[CartOut])
def remove_cart_item(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = cart_service.remove_item(db, current_user.id, product_id)
    _log(db, request, current_user, "CART_DELETE", cart, product_id=product_id)
    return ok(cart, "Item removed from cart successfully")


@router.delete("/clear", response_model=ApiResponse[CartOut])
def clear_cart(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    cart = cart_service.clear_cart(db, current_user.id)
    _log(db, request, current_user, "CART_CLEAR", cart)
    return ok(cart, "Cart cleared successfully")


@router.post("/sync-prices", response_model=ApiResponse[CartOut])
def sync_prices(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    cart, message = cart_service.sync_prices(db, current_user.id)
    _log(db, request, current_user, "CART_SYNC", cart)
    return ok(cart, message)
