# backend/services/orders.py
"""Order workflow: cart to order conversion, stock bookkeeping and the status lifecycle."""
import logging
import random
import time
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import or_, func, case
from sqlalchemy.orm import Session

from models.address import Address
from models.cart import Cart
from models.order import Order, OrderItem, OrderStatus, CANCELLABLE_STATUSES
from models.product import Product
from models.users import User
from utils.clock import utcnow
from utils.errors import NotFoundError, InvalidError
from utils.pricing import shipping_for, tax_for

logger = logging.getLogger(__name__)

ORDER_STATUSES = [s.value for s in OrderStatus]


def generate_order_number() -> str:
    return f"ORD{int(time.time() * 1000)}{random.randint(0, 999):03d}"


def _locked_product(db: Session, product_id: int) -> Optional[Product]:
    # FOR UPDATE is ignored by SQLite
    return db.query(Product).filter(Product.id == product_id).with_for_update().first()


def create_order(
    db: Session,
    user: User,
    shipping_address_id: int,
    payment_method: str,
    coupon_code: Optional[str] = None,
    notes: Optional[str] = None,
) -> Order:
    cart = db.query(Cart).filter(Cart.user_id == user.id).first()
    if not cart or not cart.items:
        raise InvalidError("Cart is empty")

    address = (
        db.query(Address)
        .filter(Address.id == shipping_address_id, Address.user_id == user.id)
        .first()
    )
    if not address:
        raise NotFoundError("Shipping address not found")

    # 1. Validate every line against the locked product rows; nothing is written yet
    lines: List[Tuple[Product, OrderItem]] = []
    total_amount = 0.0
    for cart_item in cart.items:
        product = _locked_product(db, cart_item.product_id)
        if not product or not product.is_available:
            name = product.name if product else "Unknown"
            raise InvalidError(f"Product {name} is not available")
        if cart_item.quantity > product.stock_quantity:
            raise InvalidError(
                f"Insufficient stock for {product.name}. Available: {product.stock_quantity}"
            )

        price = product.effective_price
        subtotal = round(price * cart_item.quantity, 2)
        lines.append((product, OrderItem(
            product_id=product.id,
            product_name=product.name,
            product_image=(product.images or [""])[0],
            quantity=cart_item.quantity,
            price=price,
            subtotal=subtotal,
        )))
        total_amount += subtotal

    # 2. Amounts; a coupon code is recorded on the order but not deducted
    total_amount = round(total_amount, 2)
    shipping_amount = shipping_for(total_amount)
    tax_amount = tax_for(total_amount)
    discount_amount = 0
    final_amount = round(total_amount + shipping_amount + tax_amount - discount_amount, 2)

    # 3. Order, stock, cart; one commit
    order = Order(
        order_number=generate_order_number(),
        user_id=user.id,
        items=[item for _, item in lines],
        total_amount=total_amount,
        discount_amount=discount_amount,
        shipping_amount=shipping_amount,
        tax_amount=tax_amount,
        final_amount=final_amount,
        payment_method=payment_method,
        shipping_address_line1=address.address_line1,
        shipping_address_line2=address.address_line2,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_pincode=address.pincode,
        shipping_country=address.country,
        shipping_phone=address.phone,
        coupon_code=coupon_code.strip().upper() if coupon_code else None,
        notes=notes,
    )
    db.add(order)
    db.flush()

    for product, item in lines:
        product.stock_quantity -= item.quantity

    cart.items.clear()
    db.commit()
    db.refresh(order)
    logger.info("Order %s placed by user %s (final=%.2f)", order.order_number, user.id, final_amount)
    return order


def _scoped_order(db: Session, user: User, order_id: int) -> Order:
    query = db.query(Order).filter(Order.id == order_id)
    # Customers only ever see their own orders
    if not user.is_admin:
        query = query.filter(Order.user_id == user.id)
    order = query.first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def get_order(db: Session, user: User, order_id: int) -> Order:
    return _scoped_order(db, user, order_id)


def list_user_orders(
    db: Session, user_id: int, status: Optional[str] = None, page: int = 1, page_size: int = 10
) -> Tuple[List[Order], int]:
    query = db.query(Order).filter(Order.user_id == user_id)
    if status:
        query = query.filter(Order.status == status)
    total = query.count()
    items = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def list_all_orders(
    db: Session,
    *,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    payment_method: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
) -> Tuple[List[Order], int]:
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if payment_status:
        query = query.filter(Order.payment_status == payment_status)
    if payment_method:
        query = query.filter(Order.payment_method == payment_method)
    if start_date:
        query = query.filter(Order.created_at >= start_date)
    if end_date:
        query = query.filter(Order.created_at <= end_date)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Order.order_number.ilike(like), Order.shipping_phone.ilike(like)))

    total = query.count()
    items = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def cancel_order(db: Session, user: User, order_id: int, reason: Optional[str] = None) -> Order:
    order = _scoped_order(db, user, order_id)
    if order.status not in CANCELLABLE_STATUSES:
        raise InvalidError("Order cannot be cancelled at this stage")

    for item in order.items:
        # Snapshot lines whose product was deleted have nothing to restore
        if item.product_id is None:
            continue
        product = _locked_product(db, item.product_id)
        if product:
            product.stock_quantity += item.quantity

    order.status = OrderStatus.CANCELLED.value
    order.cancelled_at = utcnow()
    order.cancellation_reason = reason or "Cancelled by user"
    db.commit()
    db.refresh(order)
    logger.info("Order %s cancelled by user %s", order.order_number, user.id)
    return order


def update_order_status(
    db: Session,
    order_id: int,
    status: str,
    tracking_number: Optional[str] = None,
    notes: Optional[str] = None,
) -> Order:
    if not status:
        raise InvalidError("Status is required")
    if status not in ORDER_STATUSES:
        raise InvalidError("Invalid status")

    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")

    order.status = status
    if tracking_number:
        order.tracking_number = tracking_number
    if notes:
        order.notes = notes
    if status == OrderStatus.DELIVERED.value:
        order.delivered_at = utcnow()
    db.commit()
    db.refresh(order)
    return order


def order_stats(db: Session, period_days: int = 30) -> dict:
    since = utcnow() - timedelta(days=period_days)

    def _count(status: OrderStatus):
        return func.sum(case((Order.status == status.value, 1), else_=0))

    row = (
        db.query(
            func.count(Order.id),
            func.sum(Order.final_amount),
            func.avg(Order.final_amount),
            _count(OrderStatus.PENDING),
            _count(OrderStatus.CONFIRMED),
            _count(OrderStatus.SHIPPED),
            _count(OrderStatus.DELIVERED),
            _count(OrderStatus.CANCELLED),
        )
        .filter(Order.created_at >= since)
        .one()
    )
    return {
        "total_orders": row[0] or 0,
        "total_revenue": round(row[1] or 0, 2),
        "average_order_value": round(row[2] or 0, 2),
        "pending_orders": row[3] or 0,
        "confirmed_orders": row[4] or 0,
        "shipped_orders": row[5] or 0,
        "delivered_orders": row[6] or 0,
        "cancelled_orders": row[7] or 0,
    }
