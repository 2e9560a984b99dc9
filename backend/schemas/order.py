from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime

from schemas.common import ORMBase
from schemas.user import UserBrief

PaymentMethodLiteral = Literal["cod", "online", "wallet"]


# Input schema for placing an order from the current cart
class OrderCreatePayload(BaseModel):
    shipping_address_id: int
    payment_method: PaymentMethodLiteral
    coupon_code: Optional[str] = None
    notes: Optional[str] = None


# Output schema for an individual order line item
class OrderItemOut(ORMBase):
    product_id: Optional[int] = None
    product_name: str
    product_image: str = ""
    quantity: int
    price: float
    subtotal: float


class ShippingAddressOut(BaseModel):
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    country: str
    phone: Optional[str] = None


# Output schema representing the full order details
class OrderResponse(ORMBase):
    id: int
    order_number: str
    user_id: int
    user: Optional[UserBrief] = None
    items: List[OrderItemOut]
    total_amount: float
    discount_amount: float
    shipping_amount: float
    tax_amount: float
    final_amount: float
    status: str
    payment_method: str
    payment_status: str
    shipping_address: ShippingAddressOut
    coupon_code: Optional[str] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None


# Schema for updating order status (validated against the enumeration by the service)
class OrderStatusPatch(BaseModel):
    status: str
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class OrderCancelPayload(BaseModel):
    cancellation_reason: Optional[str] = None


class OrderStats(BaseModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    pending_orders: int
    confirmed_orders: int
    shipped_orders: int
    delivered_orders: int
    cancelled_orders: int
