# backend/models/wishlist.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Products a user saved for later; one wishlist per user
class Wishlist(Base):
    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    items = relationship(
        "WishlistItem", back_populates="wishlist", cascade="all, delete-orphan", order_by="WishlistItem.id"
    )

    def find_item(self, product_id: int):
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id = Column(Integer, primary_key=True, index=True)
    wishlist_id = Column(Integer, ForeignKey("wishlists.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    added_at = Column(DateTime, server_default=func.now())

    wishlist = relationship("Wishlist", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("wishlist_id", "product_id", name="uq_wishlistitem_wishlist_product"),
    )
