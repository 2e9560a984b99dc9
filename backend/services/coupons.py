# backend/services/coupons.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.coupon import Coupon, CouponStatus, DiscountType
from utils.clock import utcnow, as_naive_utc
from utils.errors import NotFoundError, InvalidError, ConflictError
from utils.pricing import round_half_up

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _find_active(db: Session, code: str, lock: bool = False) -> Coupon:
    query = db.query(Coupon).filter(
        Coupon.code == normalize_code(code), Coupon.status == CouponStatus.ACTIVE.value
    )
    if lock:
        query = query.with_for_update()
    coupon = query.first()
    if not coupon:
        raise NotFoundError("Invalid coupon code")
    return coupon


def discount_for(coupon: Coupon, cart_total: float) -> int:
    """Discount granted by ``coupon`` on ``cart_total``, capped and rounded half up."""
    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        discount = cart_total * coupon.discount_value / 100
        if coupon.max_discount_amount:
            discount = min(discount, coupon.max_discount_amount)
    else:
        discount = coupon.discount_value
    return round_half_up(min(discount, cart_total))


def validate_coupon(db: Session, code: str, cart_total: float, now=None) -> dict:
    coupon = _find_active(db, code)
    now = now or utcnow()

    if now < coupon.start_date or now > coupon.expiry_date:
        raise InvalidError("Coupon is expired or not yet valid")
    if coupon.is_exhausted:
        raise InvalidError("Coupon usage limit exceeded")
    if cart_total < coupon.min_purchase_amount:
        raise InvalidError(f"Minimum purchase amount of {coupon.min_purchase_amount:g} required")

    discount = discount_for(coupon, cart_total)
    return {
        "valid": True,
        "coupon": {
            "code": coupon.code,
            "description": coupon.description,
            "discount_type": coupon.discount_type,
            "discount_value": coupon.discount_value,
        },
        "discount_amount": discount,
        "final_amount": round(cart_total - discount, 2),
    }


def apply_coupon(db: Session, code: str) -> Coupon:
    """Consume one use of an active coupon.

    Limits are not re-checked here; callers validate first.
    """
    coupon = _find_active(db, code, lock=True)
    coupon.used_count = (coupon.used_count or 0) + 1
    db.commit()
    db.refresh(coupon)
    logger.info("Coupon %s applied (%d/%d)", coupon.code, coupon.used_count, coupon.usage_limit)
    return coupon


def active_coupons(db: Session, now=None) -> List[Coupon]:
    now = now or utcnow()
    return (
        db.query(Coupon)
        .filter(
            Coupon.status == CouponStatus.ACTIVE.value,
            Coupon.start_date <= now,
            Coupon.expiry_date >= now,
            Coupon.used_count < Coupon.usage_limit,
        )
        .order_by(Coupon.expiry_date.asc())
        .all()
    )


# ---- ADMIN ----

def _check_rules(discount_type: str, discount_value: float, start_date, expiry_date) -> None:
    if discount_type == DiscountType.PERCENTAGE.value and not 1 <= discount_value <= 100:
        raise InvalidError("Percentage discount must be between 1 and 100")
    if start_date >= expiry_date:
        raise InvalidError("Expiry date must be after start date")


def create_coupon(db: Session, data: dict, created_by: Optional[int] = None) -> Coupon:
    data = dict(data)
    data["code"] = normalize_code(data["code"])
    data["start_date"] = as_naive_utc(data["start_date"])
    data["expiry_date"] = as_naive_utc(data["expiry_date"])
    _check_rules(data["discount_type"], data["discount_value"], data["start_date"], data["expiry_date"])

    if db.query(Coupon).filter(Coupon.code == data["code"]).first():
        raise ConflictError("Coupon code already exists")

    coupon = Coupon(**data, created_by=created_by)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


def list_coupons(
    db: Session, status: Optional[str] = None, search: Optional[str] = None, page: int = 1, page_size: int = 10
) -> Tuple[List[Coupon], int]:
    query = db.query(Coupon)
    if status:
        query = query.filter(Coupon.status == status)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Coupon.code.ilike(like), Coupon.description.ilike(like)))
    total = query.count()
    items = query.order_by(Coupon.id.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return items, total


def get_coupon(db: Session, coupon_id: int) -> Coupon:
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise NotFoundError("Coupon not found")
    return coupon


def update_coupon(db: Session, coupon_id: int, changes: dict) -> Coupon:
    coupon = get_coupon(db, coupon_id)
    changes = dict(changes)
    for key in ("start_date", "expiry_date"):
        if changes.get(key) is not None:
            changes[key] = as_naive_utc(changes[key])

    _check_rules(
        changes.get("discount_type", coupon.discount_type),
        changes.get("discount_value", coupon.discount_value),
        changes.get("start_date", coupon.start_date),
        changes.get("expiry_date", coupon.expiry_date),
    )
    for field, value in changes.items():
        setattr(coupon, field, value)
    db.commit()
    db.refresh(coupon)
    return coupon


def delete_coupon(db: Session, coupon_id: int) -> None:
    coupon = get_coupon(db, coupon_id)
    db.delete(coupon)
    db.commit()
