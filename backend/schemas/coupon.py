from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

from schemas.common import ORMBase

DiscountTypeLiteral = Literal["percentage", "fixed"]
CouponStatusLiteral = Literal["active", "inactive", "expired"]


class CouponCreate(BaseModel):
    code: str = Field(min_length=3, max_length=30)
    description: str = Field(min_length=1)
    discount_type: DiscountTypeLiteral
    discount_value: float = Field(gt=0)
    min_purchase_amount: float = Field(default=0, ge=0)
    max_discount_amount: Optional[float] = Field(default=None, ge=0)
    usage_limit: int = Field(default=1, ge=1)
    user_usage_limit: int = Field(default=1, ge=1)
    start_date: datetime
    expiry_date: datetime


# Schema for partial coupon updates
class CouponUpdate(BaseModel):
    description: Optional[str] = None
    discount_type: Optional[DiscountTypeLiteral] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_purchase_amount: Optional[float] = Field(None, ge=0)
    max_discount_amount: Optional[float] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    user_usage_limit: Optional[int] = Field(None, ge=1)
    start_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    status: Optional[CouponStatusLiteral] = None


class CouponOut(ORMBase):
    id: int
    code: str
    description: str
    discount_type: str
    discount_value: float
    min_purchase_amount: float
    max_discount_amount: Optional[float] = None
    usage_limit: int
    used_count: int
    user_usage_limit: int
    start_date: datetime
    expiry_date: datetime
    status: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


# Public view of an active coupon
class CouponPublic(ORMBase):
    code: str
    description: str
    discount_type: str
    discount_value: float
    min_purchase_amount: float
    expiry_date: datetime


class CouponValidateRequest(BaseModel):
    code: str
    cart_total: float = Field(ge=0)


class CouponApplyRequest(BaseModel):
    code: str


class CouponSummary(BaseModel):
    code: str
    description: str
    discount_type: str
    discount_value: float


class CouponValidation(BaseModel):
    valid: bool
    coupon: CouponSummary
    discount_amount: int
    final_amount: float
