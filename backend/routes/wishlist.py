# backend/routes/wishlist.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.cart import CartOut
from schemas.common import ApiResponse, ok
from schemas.wishlist import WishlistAddItem, WishlistMoveToCart, WishlistOut
from services import wishlist as wishlist_service
from utils.audit import write_log
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


@router.get("", response_model=ApiResponse[WishlistOut])
def get_wishlist(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(wishlist_service.get_wishlist(db, current_user.id), "Wishlist fetched successfully")


@router.get("/summary", response_model=ApiResponse[dict])
def wishlist_summary(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(wishlist_service.wishlist_summary(db, current_user.id), "Wishlist summary fetched successfully")


@router.get("/check/{product_id}", response_model=ApiResponse[dict])
def check_item(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    found = wishlist_service.is_in_wishlist(db, current_user.id, product_id)
    return ok({"in_wishlist": found}, "Wishlist status checked")


@router.post("/add", response_model=ApiResponse[WishlistOut])
def add_item(
    payload: WishlistAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    wishlist = wishlist_service.add_item(db, current_user.id, payload.product_id)
    write_log(db, user_id=current_user.id, action="WISHLIST_ADD", resource="wishlist",
              request=request, meta={"product_id": payload.product_id})
    return ok(wishlist, "Product added to wishlist successfully")


@router.delete("/remove/{product_id}", response_model=ApiResponse[WishlistOut])
def remove_item(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    wishlist = wishlist_service.remove_item(db, current_user.id, product_id)
    write_log(db, user_id=current_user.id, action="WISHLIST_REMOVE", resource="wishlist",
              request=request, meta={"product_id": product_id})
    return ok(wishlist, "Product removed from wishlist successfully")


@router.delete("/clear", response_model=ApiResponse[WishlistOut])
def clear_wishlist(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    wishlist = wishlist_service.clear_wishlist(db, current_user.id)
    write_log(db, user_id=current_user.id, action="WISHLIST_CLEAR", resource="wishlist", request=request)
    return ok(wishlist, "Wishlist cleared successfully")


@router.post("/move-to-cart", response_model=ApiResponse[CartOut])
def move_to_cart(
    payload: WishlistMoveToCart,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = wishlist_service.move_to_cart(db, current_user.id, payload.product_id, payload.quantity)
    write_log(db, user_id=current_user.id, action="WISHLIST_TO_CART", resource="wishlist",
              request=request, meta={"product_id": payload.product_id, "qty": payload.quantity})
    return ok(result["cart"], "Product moved to cart successfully")
