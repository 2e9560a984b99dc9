# backend/services/analytics.py
"""Admin dashboard figures.

Aggregations that need calendar bucketing are done in pandas over the raw
order rows so they behave the same on SQLite and PostgreSQL.
"""
from datetime import timedelta
from typing import List

import pandas as pd
from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from config import settings
from models.category import Category
from models.order import Order, OrderItem, OrderStatus
from models.product import Product, ProductStatus
from models.users import User, UserRole
from utils.clock import utcnow

# Orders that count as sales
SALE_STATUSES = [OrderStatus.CONFIRMED.value, OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value]

GROUP_FORMATS = {
    "hour": "%Y-%m-%d %H:00",
    "day": "%Y-%m-%d",
    "week": "%Y-%U",
    "month": "%Y-%m",
}


def _since(period_days: int):
    return utcnow() - timedelta(days=period_days)


def _sales_frame(db: Session, since) -> pd.DataFrame:
    rows = (
        db.query(Order.created_at, Order.final_amount)
        .filter(Order.created_at >= since, Order.status.in_(SALE_STATUSES))
        .all()
    )
    df = pd.DataFrame(rows, columns=["created_at", "final_amount"])
    df["created_at"] = pd.to_datetime(df["created_at"])
    return df


def sales_series(db: Session, period_days: int = 30, group_by: str = "day") -> List[dict]:
    df = _sales_frame(db, _since(period_days))
    if df.empty:
        return []

    fmt = GROUP_FORMATS.get(group_by, GROUP_FORMATS["day"])
    df["bucket"] = df["created_at"].dt.strftime(fmt)
    grouped = (
        df.groupby("bucket")["final_amount"]
        .agg(total_sales="sum", total_orders="count", average_order_value="mean")
        .reset_index()
        .sort_values("bucket")
    )
    return [
        {
            "period": row["bucket"],
            "total_sales": round(float(row["total_sales"]), 2),
            "total_orders": int(row["total_orders"]),
            "average_order_value": round(float(row["average_order_value"]), 2),
        }
        for row in grouped.to_dict("records")
    ]


def _order_brief(order: Order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "final_amount": order.final_amount,
        "created_at": order.created_at,
        "user": {"id": order.user.id, "name": order.user.name, "email": order.user.email} if order.user else None,
    }


def dashboard_overview(db: Session, period_days: int = 30) -> dict:
    since = _since(period_days)
    recent_orders = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(5).all()
    low_stock = (
        db.query(Product)
        .filter(Product.stock_quantity <= settings.LOW_STOCK_THRESHOLD, Product.status == ProductStatus.ACTIVE.value)
        .order_by(Product.stock_quantity.asc())
        .limit(10)
        .all()
    )

    total_sales, sales_count, average = (
        db.query(func.sum(Order.final_amount), func.count(Order.id), func.avg(Order.final_amount))
        .filter(Order.created_at >= since, Order.status.in_(SALE_STATUSES))
        .one()
    )

    return {
        "total_customers": db.query(User).filter(User.role == UserRole.CUSTOMER.value).count(),
        "total_products": db.query(Product).count(),
        "total_categories": db.query(Category).count(),
        "total_orders": db.query(Order).count(),
        "total_sales": round(total_sales or 0, 2),
        "sales_orders": sales_count or 0,
        "average_order_value": round(average or 0),
        "recent_orders": [_order_brief(o) for o in recent_orders],
        "low_stock_products": [
            {"id": p.id, "name": p.name, "sku": p.sku, "stock_quantity": p.stock_quantity} for p in low_stock
        ],
        "daily_sales": sales_series(db, period_days=7, group_by="day"),
    }


def top_products(db: Session, limit: int = 10, period_days: int = 30) -> List[dict]:
    rows = (
        db.query(
            OrderItem.product_id,
            func.max(OrderItem.product_name).label("product_name"),
            func.sum(OrderItem.quantity).label("quantity_sold"),
            func.sum(OrderItem.subtotal).label("revenue"),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.created_at >= _since(period_days), Order.status.in_(SALE_STATUSES))
        .group_by(OrderItem.product_id)
        .order_by(desc("quantity_sold"))
        .limit(limit)
        .all()
    )

    result = []
    for row in rows:
        product = db.get(Product, row.product_id) if row.product_id else None
        result.append({
            "product_id": row.product_id,
            "product_name": row.product_name,
            "total_quantity_sold": int(row.quantity_sold or 0),
            "total_revenue": round(row.revenue or 0, 2),
            "current_stock": product.stock_quantity if product else None,
            "product_image": (product.images or [None])[0] if product else None,
        })
    return result


def customer_analytics(db: Session, period_days: int = 30) -> dict:
    since = _since(period_days)
    new_customers = (
        db.query(User)
        .filter(User.role == UserRole.CUSTOMER.value, User.created_at >= since)
        .count()
    )
    active_customers = (
        db.query(func.count(func.distinct(Order.user_id)))
        .filter(Order.created_at >= since)
        .scalar()
    )
    spenders = (
        db.query(
            User.id, User.name, User.email,
            func.sum(Order.final_amount).label("total_spent"),
            func.count(Order.id).label("total_orders"),
        )
        .join(Order, Order.user_id == User.id)
        .filter(Order.created_at >= since, Order.status.in_(SALE_STATUSES))
        .group_by(User.id, User.name, User.email)
        .order_by(desc("total_spent"))
        .limit(10)
        .all()
    )
    return {
        "new_customers": new_customers,
        "active_customers": active_customers or 0,
        "top_customers": [
            {
                "user_id": s.id,
                "user_name": s.name,
                "user_email": s.email,
                "total_spent": round(s.total_spent, 2),
                "total_orders": s.total_orders,
                "average_order_value": round(s.total_spent / s.total_orders, 2),
            }
            for s in spenders
        ],
    }


def inventory_alerts(db: Session, threshold: int = None) -> dict:
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    low_stock = (
        db.query(Product)
        .filter(
            Product.stock_quantity > 0,
            Product.stock_quantity <= threshold,
            Product.status == ProductStatus.ACTIVE.value,
        )
        .order_by(Product.stock_quantity.asc())
        .all()
    )
    # Products at zero stock are flipped to out_of_stock on save
    out_of_stock = (
        db.query(Product)
        .filter(Product.stock_quantity == 0, Product.status != ProductStatus.INACTIVE.value)
        .all()
    )
    return {
        "low_stock_products": low_stock,
        "out_of_stock_products": out_of_stock,
        "low_stock_count": len(low_stock),
        "out_of_stock_count": len(out_of_stock),
    }


def order_status_distribution(db: Session, period_days: int = 30) -> List[dict]:
    rows = (
        db.query(Order.status, func.count(Order.id), func.sum(Order.final_amount))
        .filter(Order.created_at >= _since(period_days))
        .group_by(Order.status)
        .order_by(func.count(Order.id).desc())
        .all()
    )
    return [{"status": s, "count": c, "total_value": round(v or 0, 2)} for s, c, v in rows]


def recent_activities(db: Session, limit: int = 20) -> List[dict]:
    per_kind = max(limit // 3, 1)
    orders = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(per_kind).all()
    customers = (
        db.query(User)
        .filter(User.role == UserRole.CUSTOMER.value)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(per_kind)
        .all()
    )
    products = db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).limit(per_kind).all()

    activities = [
        {
            "type": "order",
            "title": f"New order {o.order_number}",
            "description": f"Order placed by {o.user.name if o.user else 'unknown'}",
            "amount": o.final_amount,
            "timestamp": o.created_at,
        }
        for o in orders
    ]
    activities += [
        {
            "type": "customer",
            "title": "New customer registered",
            "description": f"{c.name} joined",
            "amount": None,
            "timestamp": c.created_at,
        }
        for c in customers
    ]
    activities += [
        {
            "type": "product",
            "title": "New product added",
            "description": f"{p.name} in {p.category.name if p.category else 'uncategorized'}",
            "amount": None,
            "timestamp": p.created_at,
        }
        for p in products
    ]
    activities.sort(key=lambda a: a["timestamp"], reverse=True)
    return activities[:limit]
