# backend/routes/admin.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.admin import (
    DashboardOverview, SalesPoint, TopProduct, CustomerAnalytics,
    InventoryAlerts, StatusBucket, Activity,
)
from schemas.common import ApiResponse, ok
from services import analytics
from utils.tokenJWT import admin_required

# Every endpoint here is admin only
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(admin_required)])

PERIOD = Query(30, ge=1, le=3650, description="Look-back window in days")


@router.get("/dashboard", response_model=ApiResponse[DashboardOverview])
def dashboard(period: int = PERIOD, db: Session = Depends(get_db)):
    return ok(analytics.dashboard_overview(db, period), "Dashboard overview fetched successfully")


@router.get("/analytics/sales", response_model=ApiResponse[List[SalesPoint]])
def sales_analytics(
    period: int = PERIOD,
    group_by: str = Query("day", pattern="^(hour|day|week|month)$"),
    db: Session = Depends(get_db),
):
    return ok(analytics.sales_series(db, period, group_by), "Sales analytics fetched successfully")


@router.get("/analytics/top-products", response_model=ApiResponse[List[TopProduct]])
def top_products(limit: int = Query(10, ge=1, le=100), period: int = PERIOD, db: Session = Depends(get_db)):
    return ok(analytics.top_products(db, limit, period), "Top selling products fetched successfully")


@router.get("/analytics/customers", response_model=ApiResponse[CustomerAnalytics])
def customer_analytics(period: int = PERIOD, db: Session = Depends(get_db)):
    return ok(analytics.customer_analytics(db, period), "Customer analytics fetched successfully")


@router.get("/inventory/alerts", response_model=ApiResponse[InventoryAlerts])
def inventory_alerts(threshold: Optional[int] = Query(None, ge=0), db: Session = Depends(get_db)):
    return ok(analytics.inventory_alerts(db, threshold), "Inventory alerts fetched successfully")


@router.get("/analytics/order-status", response_model=ApiResponse[List[StatusBucket]])
def order_status_distribution(period: int = PERIOD, db: Session = Depends(get_db)):
    return ok(analytics.order_status_distribution(db, period), "Order status distribution fetched successfully")


@router.get("/activities", response_model=ApiResponse[List[Activity]])
def recent_activities(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db)):
    return ok(analytics.recent_activities(db, limit), "Recent activities fetched successfully")
