from pydantic import BaseModel
from typing import List, Optional, Literal, Dict
from datetime import datetime

from schemas.common import ORMBase, Page
from schemas.user import UserBrief


class ReviewStatusPatch(BaseModel):
    status: Literal["pending", "approved", "rejected"]


class ReviewProductBrief(ORMBase):
    id: int
    name: str
    slug: str


class ReviewOut(ORMBase):
    id: int
    product_id: int
    product: Optional[ReviewProductBrief] = None
    user_id: int
    user: Optional[UserBrief] = None
    rating: int
    comment: str
    images: List[str] = []
    verified_purchase: bool
    helpful_count: int
    status: str
    created_at: Optional[datetime] = None


class ProductReviews(BaseModel):
    reviews: Page[ReviewOut]
    average_rating: float
    total_reviews: int


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]
