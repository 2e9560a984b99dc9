# backend/routes/coupons.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import ApiResponse, Page, ok, page_of
from schemas.coupon import (
    CouponCreate, CouponUpdate, CouponOut, CouponPublic,
    CouponValidateRequest, CouponApplyRequest, CouponValidation,
)
from services import coupons as coupon_service
from utils.audit import write_log
from utils.tokenJWT import get_current_user, admin_required

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.get("/active", response_model=ApiResponse[List[CouponPublic]])
def active_coupons(db: Session = Depends(get_db)):
    return ok(coupon_service.active_coupons(db), "Active coupons fetched successfully")


@router.post("/validate", response_model=ApiResponse[CouponValidation])
def validate_coupon(
    payload: CouponValidateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(coupon_service.validate_coupon(db, payload.code, payload.cart_total), "Coupon is valid")


# Consumes one use; callers validate first
@router.post("/apply", response_model=ApiResponse[CouponOut])
def apply_coupon(
    payload: CouponApplyRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    coupon = coupon_service.apply_coupon(db, payload.code)
    write_log(db, user_id=current_user.id, action="COUPON_APPLY", resource="coupons",
              request=request, meta={"code": coupon.code, "used_count": coupon.used_count})
    return ok(coupon, "Coupon applied successfully")


# =========================
# ADMIN
# =========================
@router.get("", response_model=ApiResponse[Page[CouponOut]])
def list_coupons(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    items, total = coupon_service.list_coupons(db, status_filter, search, page, page_size)
    return ok(page_of(items, total, page, page_size), "Coupons fetched successfully")


@router.post("", response_model=ApiResponse[CouponOut], status_code=status.HTTP_201_CREATED)
def create_coupon(
    payload: CouponCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    coupon = coupon_service.create_coupon(db, payload.model_dump(), created_by=current_user.id)
    write_log(db, user_id=current_user.id, action="COUPON_CREATE", resource="coupons",
              request=request, meta={"coupon_id": coupon.id, "code": coupon.code})
    return ok(coupon, "Coupon created successfully", 201)


@router.get("/{coupon_id}", response_model=ApiResponse[CouponOut])
def get_coupon(coupon_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return ok(coupon_service.get_coupon(db, coupon_id), "Coupon fetched successfully")


@router.put("/{coupon_id}", response_model=ApiResponse[CouponOut])
def update_coupon(
    coupon_id: int,
    payload: CouponUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    # An explicit null leaves the stored value as it is
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    coupon = coupon_service.update_coupon(db, coupon_id, changes)
    write_log(db, user_id=current_user.id, action="COUPON_UPDATE", resource="coupons",
              request=request, meta={"coupon_id": coupon_id})
    return ok(coupon, "Coupon updated successfully")


@router.delete("/{coupon_id}", response_model=ApiResponse[dict])
def delete_coupon(
    coupon_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    coupon_service.delete_coupon(db, coupon_id)
    write_log(db, user_id=current_user.id, action="COUPON_DELETE", resource="coupons",
              request=request, meta={"coupon_id": coupon_id})
    return ok({}, "Coupon deleted successfully")
