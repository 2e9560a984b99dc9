from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from schemas.common import ORMBase
from schemas.product import ProductBrief


class WishlistAddItem(BaseModel):
    product_id: int


class WishlistMoveToCart(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class WishlistItemOut(ORMBase):
    id: int
    product_id: int
    product: Optional[ProductBrief] = None
    added_at: Optional[datetime] = None


class WishlistOut(ORMBase):
    id: int
    user_id: int
    items: List[WishlistItemOut]
