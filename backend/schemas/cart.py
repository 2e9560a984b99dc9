from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from schemas.common import ORMBase
from schemas.product import ProductBrief

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for updating a line quantity
class CartUpdateItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)

# Response schema for a single cart line item
class CartItemOut(ORMBase):
    id: int
    product_id: int
    product: Optional[ProductBrief] = None
    quantity: int
    price: float
    subtotal: float
    added_at: Optional[datetime] = None

# Response schema for the entire cart
class CartOut(ORMBase):
    id: int
    user_id: int
    items: List[CartItemOut]
    total_items: int
    total_amount: float

class CartSummary(BaseModel):
    total_items: int
    total_amount: float
    items_count: int
