# backend/models/category.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, event, func
from sqlalchemy.orm import relationship
from slugify import slugify
from database import Base


class CategoryStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# Product category; categories form a tree through parent_id
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    image = Column(String, nullable=True)
    status = Column(String, nullable=False, default=CategoryStatus.ACTIVE.value, index=True)
    description = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    parent = relationship("Category", remote_side=[id], backref="children")


@event.listens_for(Category, "before_insert")
@event.listens_for(Category, "before_update")
def _category_slug(mapper, connection, target):
    if target.name:
        target.slug = slugify(target.name)
