from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

from schemas.common import ORMBase

CategoryStatusLiteral = Literal["active", "inactive"]


class CategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    parent_id: Optional[int] = None
    description: Optional[str] = None
    status: CategoryStatusLiteral = "active"
    image: Optional[str] = None


# Schema for partial category updates
class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    parent_id: Optional[int] = None
    description: Optional[str] = None
    status: Optional[CategoryStatusLiteral] = None
    image: Optional[str] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    slug: str
    parent_id: Optional[int] = None
    image: Optional[str] = None
    status: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryBrief(ORMBase):
    id: int
    name: str
    slug: str


# Node of the category hierarchy
class CategoryNode(CategoryOut):
    product_count: Optional[int] = None
    children: List["CategoryNode"] = []


class CategoryDetail(CategoryOut):
    subcategories: List[CategoryOut]
    product_count: int


CategoryNode.model_rebuild()
