# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, Float, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Represents the user's shopping cart; exactly one per user
class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # One-to-many relationship with cart items
    items = relationship(
        "CartItem", back_populates="cart", cascade="all, delete-orphan", order_by="CartItem.id"
    )

    # Totals are always derived from the current items, never stored
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_amount(self) -> float:
        return round(sum(item.price * item.quantity for item in self.items), 2)

    def find_item(self, product_id: int):
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


# Represents a single line (product + quantity + price snapshot) within a cart
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False, default=1)
    price = Column(Float, nullable=False) # Effective unit price at the moment of addition
    added_at = Column(DateTime, server_default=func.now())

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        # One line per product in a cart
        UniqueConstraint("cart_id", "product_id", name="uq_cartitem_cart_product"),
    )

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)
