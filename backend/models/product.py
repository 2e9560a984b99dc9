# backend/models/product.py
import enum
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, ForeignKey, DateTime, JSON,
    CheckConstraint, event, func,
)
from sqlalchemy.orm import relationship
from slugify import slugify
from database import Base


class ProductStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


# A sellable catalog item. Source of truth for price, stock and availability.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=False, default="")

    # Prices are guarded by check constraints
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    discount_price = Column(Float, CheckConstraint("discount_price >= 0"), nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)
    status = Column(String, nullable=False, default=ProductStatus.ACTIVE.value, index=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)

    images = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    specifications = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    category = relationship("Category")

    @property
    def effective_price(self) -> float:
        """Price a customer pays right now: the discount price when it undercuts the list price."""
        if self.discount_price and self.discount_price < self.price:
            return self.discount_price
        return self.price

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value


@event.listens_for(Product, "before_insert")
@event.listens_for(Product, "before_update")
def _product_before_save(mapper, connection, target):
    # sku is unique, so name + sku always yields a unique slug
    if target.name:
        target.slug = slugify(f"{target.name}-{target.sku}")

    # Availability follows stock
    if target.stock_quantity == 0:
        target.status = ProductStatus.OUT_OF_STOCK.value
    elif target.stock_quantity and target.status == ProductStatus.OUT_OF_STOCK.value:
        target.status = ProductStatus.ACTIVE.value
