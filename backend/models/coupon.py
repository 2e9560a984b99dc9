# backend/models/coupon.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, event, func
from database import Base
from utils.clock import utcnow


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


# A discount code shared by all customers
class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=False)
    discount_type = Column(String, nullable=False)
    discount_value = Column(Float, CheckConstraint("discount_value >= 0"), nullable=False)
    min_purchase_amount = Column(Float, nullable=False, default=0)
    max_discount_amount = Column(Float, nullable=True) # Cap for percentage coupons
    usage_limit = Column(Integer, CheckConstraint("usage_limit >= 1"), nullable=False, default=1)
    used_count = Column(Integer, CheckConstraint("used_count >= 0"), nullable=False, default=0)
    user_usage_limit = Column(Integer, nullable=False, default=1) # Stored and validated only; per-user usage is not tracked or enforced
    start_date = Column(DateTime, nullable=False)
    expiry_date = Column(DateTime, nullable=False, index=True)
    status = Column(String, nullable=False, default=CouponStatus.ACTIVE.value, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_exhausted(self) -> bool:
        return (self.used_count or 0) >= (self.usage_limit or 1)


def refresh_coupon_status(coupon: Coupon, now=None) -> None:
    """Recompute status from the clock and usage counters.

    Expired by date or exhausted by usage always wins. Otherwise a coupon
    inside its window becomes active, except one an admin switched to
    inactive.
    """
    now = now or utcnow()
    if now > coupon.expiry_date or coupon.is_exhausted:
        coupon.status = CouponStatus.EXPIRED.value
    elif now >= coupon.start_date and coupon.status != CouponStatus.INACTIVE.value:
        coupon.status = CouponStatus.ACTIVE.value


@event.listens_for(Coupon, "before_insert")
@event.listens_for(Coupon, "before_update")
def _coupon_before_save(mapper, connection, target):
    if target.code:
        target.code = target.code.strip().upper()
    if target.used_count is None:
        target.used_count = 0
    if target.status is None:
        target.status = CouponStatus.ACTIVE.value
    refresh_coupon_status(target)
