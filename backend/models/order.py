# backend/models/order.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


# Only these states may be cancelled; cancelling restores stock
CANCELLABLE_STATUSES = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}


class PaymentMethod(str, enum.Enum):
    COD = "cod"
    ONLINE = "online"
    WALLET = "wallet"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value, index=True)

    # Amounts computed once at creation
    total_amount = Column(Float, CheckConstraint("total_amount >= 0"), nullable=False)
    discount_amount = Column(Float, nullable=False, default=0)
    shipping_amount = Column(Float, nullable=False, default=0)
    tax_amount = Column(Float, nullable=False, default=0)
    final_amount = Column(Float, CheckConstraint("final_amount >= 0"), nullable=False)

    # Payment details
    payment_method = Column(String, nullable=False)
    payment_status = Column(String, nullable=False, default=PaymentStatus.PENDING.value, index=True)
    payment_id = Column(String, nullable=True)

    # Shipping address copied from the address book at order time
    shipping_address_line1 = Column(String, nullable=False)
    shipping_address_line2 = Column(String, nullable=True)
    shipping_city = Column(String, nullable=False)
    shipping_state = Column(String, nullable=False)
    shipping_pincode = Column(String, nullable=False)
    shipping_country = Column(String, nullable=False)
    shipping_phone = Column(String, nullable=True, index=True)

    coupon_code = Column(String, nullable=True)
    tracking_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    delivered_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")
    user = relationship("User")

    @property
    def shipping_address(self) -> dict:
        return {
            "address_line1": self.shipping_address_line1,
            "address_line2": self.shipping_address_line2,
            "city": self.shipping_city,
            "state": self.shipping_state,
            "pincode": self.shipping_pincode,
            "country": self.shipping_country,
            "phone": self.shipping_phone,
        }


# Immutable snapshot of a purchased product; survives later product edits or deletion
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=False, default="")
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)
    price = Column(Float, nullable=False)
    subtotal = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
