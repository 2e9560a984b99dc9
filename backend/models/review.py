# backend/models/review.py
import enum
from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, DateTime, JSON, CheckConstraint, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from database import Base


class ReviewStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, CheckConstraint("rating >= 1 AND rating <= 5"), nullable=False)
    comment = Column(String, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    # Set once at creation from the user's delivered orders
    verified_purchase = Column(Boolean, nullable=False, default=False)
    helpful_count = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default=ReviewStatus.APPROVED.value, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    product = relationship("Product")

    __table_args__ = (
        # One review per user per product
        UniqueConstraint("product_id", "user_id", name="uq_review_product_user"),
    )
