# backend/routes/orders.py
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import ApiResponse, Page, ok, page_of
from schemas.order import OrderCreatePayload, OrderResponse, OrderStatusPatch, OrderCancelPayload, OrderStats
from services import orders as order_service
from utils.audit import write_log
from utils.clock import as_naive_utc
from utils.tokenJWT import get_current_user, admin_required

router = APIRouter(prefix="/orders", tags=["Orders"])


# Place an order from the current cart
@router.post("", response_model=ApiResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.create_order(
        db,
        current_user,
        payload.shipping_address_id,
        payload.payment_method,
        coupon_code=payload.coupon_code,
        notes=payload.notes,
    )
    write_log(
        db,
        user_id=current_user.id,
        action="ORDER_CREATE",
        resource="orders",
        request=request,
        meta={"order_id": order.id, "order_number": order.order_number, "final_amount": order.final_amount},
    )
    return ok(order, "Order created successfully", 201)


@router.get("/my-orders", response_model=ApiResponse[Page[OrderResponse]])
def my_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = order_service.list_user_orders(db, current_user.id, status_filter, page, page_size)
    return ok(page_of(items, total, page, page_size), "Orders fetched successfully")


# Admin: all orders with filters
@router.get("", response_model=ApiResponse[Page[OrderResponse]])
def all_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    items, total = order_service.list_all_orders(
        db,
        status=status_filter,
        payment_status=payment_status,
        payment_method=payment_method,
        start_date=as_naive_utc(start_date) if start_date else None,
        end_date=as_naive_utc(end_date) if end_date else None,
        search=search,
        page=page,
        page_size=page_size,
    )
    return ok(page_of(items, total, page, page_size), "Orders fetched successfully")


@router.get("/stats/overview", response_model=ApiResponse[OrderStats])
def order_stats(
    period: int = Query(30, ge=1, le=3650),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return ok(order_service.order_stats(db, period), "Order statistics fetched successfully")


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
def get_order(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(order_service.get_order(db, current_user, order_id), "Order fetched successfully")


@router.patch("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
def cancel_order(
    order_id: int,
    request: Request,
    payload: Optional[OrderCancelPayload] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reason = payload.cancellation_reason if payload else None
    order = order_service.cancel_order(db, current_user, order_id, reason)
    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="orders",
              request=request, meta={"order_id": order_id, "reason": order.cancellation_reason})
    return ok(order, "Order cancelled successfully")


# Admin: move an order through its lifecycle
@router.patch("/{order_id}/status", response_model=ApiResponse[OrderResponse])
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    order = order_service.update_order_status(db, order_id, payload.status, payload.tracking_number, payload.notes)
    write_log(db, user_id=current_user.id, action="ORDER_STATUS", resource="orders",
              request=request, meta={"order_id": order_id, "status": payload.status})
    return ok(order, "Order status updated successfully")
