# backend/schemas/product.py
from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict, Literal
from datetime import datetime

from schemas.common import ORMBase
from schemas.category import CategoryBrief

ProductStatusLiteral = Literal["active", "inactive", "out_of_stock"]


# Schema for creating a new product
class ProductCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    sku: str = Field(min_length=3, max_length=50)
    description: str = Field(min_length=10, max_length=2000)
    price: float = Field(ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    category_id: int
    stock_quantity: int = Field(ge=0)
    status: ProductStatusLiteral = "active"
    featured: bool = False
    tags: List[str] = []
    specifications: Optional[Dict[str, Any]] = None


# Schema for partial product updates - all fields optional
class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    sku: Optional[str] = Field(None, min_length=3, max_length=50)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    price: Optional[float] = Field(None, ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatusLiteral] = None
    featured: Optional[bool] = None
    tags: Optional[List[str]] = None
    specifications: Optional[Dict[str, Any]] = None


class StockUpdate(BaseModel):
    stock_quantity: int = Field(ge=0)


# Full product representation
class ProductOut(ORMBase):
    id: int
    name: str
    slug: str
    sku: str
    description: str
    price: float
    discount_price: Optional[float] = None
    effective_price: float
    category_id: int
    category: Optional[CategoryBrief] = None
    stock_quantity: int
    status: str
    featured: bool
    images: List[str] = []
    tags: List[str] = []
    specifications: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


# Compact product view embedded in cart and wishlist lines
class ProductBrief(ORMBase):
    id: int
    name: str
    slug: str
    price: float
    discount_price: Optional[float] = None
    images: List[str] = []
    stock_quantity: int
    status: str


class InventoryProduct(ORMBase):
    id: int
    name: str
    sku: str
    stock_quantity: int
    images: List[str] = []
    category: Optional[CategoryBrief] = None
