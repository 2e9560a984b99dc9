from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from schemas.product import InventoryProduct
from schemas.user import UserBrief


class SalesPoint(BaseModel):
    period: str
    total_sales: float
    total_orders: int
    average_order_value: float


class RecentOrder(BaseModel):
    id: int
    order_number: str
    status: str
    final_amount: float
    created_at: Optional[datetime] = None
    user: Optional[UserBrief] = None


class LowStockItem(BaseModel):
    id: int
    name: str
    sku: str
    stock_quantity: int


class DashboardOverview(BaseModel):
    total_customers: int
    total_products: int
    total_categories: int
    total_orders: int
    total_sales: float
    sales_orders: int
    average_order_value: float
    recent_orders: List[RecentOrder]
    low_stock_products: List[LowStockItem]
    daily_sales: List[SalesPoint]


class TopProduct(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    total_quantity_sold: int
    total_revenue: float
    current_stock: Optional[int] = None
    product_image: Optional[str] = None


class TopCustomer(BaseModel):
    user_id: int
    user_name: str
    user_email: str
    total_spent: float
    total_orders: int
    average_order_value: float


class CustomerAnalytics(BaseModel):
    new_customers: int
    active_customers: int
    top_customers: List[TopCustomer]


class InventoryAlerts(BaseModel):
    low_stock_products: List[InventoryProduct]
    out_of_stock_products: List[InventoryProduct]
    low_stock_count: int
    out_of_stock_count: int


class StatusBucket(BaseModel):
    status: str
    count: int
    total_value: float


class Activity(BaseModel):
    type: str
    title: str
    description: str
    amount: Optional[float] = None
    timestamp: Optional[datetime] = None
