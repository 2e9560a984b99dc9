# backend/services/reviews.py
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.orm import Session

from models.order import Order, OrderItem, OrderStatus
from models.product import Product
from models.review import Review, ReviewStatus
from models.users import User
from utils.errors import NotFoundError, ConflictError, InvalidError
from utils.storage import save_image, delete_image

MAX_REVIEW_IMAGES = 3


def has_delivered_purchase(db: Session, user_id: int, product_id: int) -> bool:
    return (
        db.query(OrderItem.id)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(
            Order.user_id == user_id,
            Order.status == OrderStatus.DELIVERED.value,
            OrderItem.product_id == product_id,
        )
        .first()
        is not None
    )


def _store_images(files: Optional[List[UploadFile]]) -> List[str]:
    # Browsers send an empty part when no file was picked
    files = [f for f in files or [] if f.filename]
    if len(files) > MAX_REVIEW_IMAGES:
        raise InvalidError(f"You can upload at most {MAX_REVIEW_IMAGES} images")
    return [save_image(f, "reviews") for f in files]


def create_review(
    db: Session,
    user: User,
    product_id: int,
    rating: int,
    comment: str,
    files: Optional[List[UploadFile]] = None,
) -> Review:
    if not 1 <= rating <= 5:
        raise InvalidError("Rating must be between 1 and 5")
    if not db.get(Product, product_id):
        raise NotFoundError("Product not found")
    if db.query(Review).filter(Review.product_id == product_id, Review.user_id == user.id).first():
        raise ConflictError("You have already reviewed this product")

    images = _store_images(files)
    review = Review(
        product_id=product_id,
        user_id=user.id,
        rating=rating,
        comment=comment,
        images=images,
        verified_purchase=has_delivered_purchase(db, user.id, product_id),
        status=ReviewStatus.APPROVED.value,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


def _approved(db: Session, product_id: int):
    return db.query(Review).filter(
        Review.product_id == product_id, Review.status == ReviewStatus.APPROVED.value
    )


def product_reviews(
    db: Session, product_id: int, rating: Optional[int] = None, page: int = 1, page_size: int = 10
) -> dict:
    query = _approved(db, product_id)
    if rating:
        query = query.filter(Review.rating == rating)
    total = query.count()
    items = (
        query.order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    avg, count = (
        db.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.product_id == product_id, Review.status == ReviewStatus.APPROVED.value)
        .one()
    )
    return {
        "items": items,
        "total": total,
        "average_rating": round(float(avg or 0), 1),
        "total_reviews": count or 0,
    }


def review_stats(db: Session, product_id: int) -> dict:
    rows = (
        db.query(Review.rating, func.count(Review.id))
        .filter(Review.product_id == product_id, Review.status == ReviewStatus.APPROVED.value)
        .group_by(Review.rating)
        .all()
    )
    distribution = {star: 0 for star in range(1, 6)}
    for rating, count in rows:
        distribution[rating] = count

    total = sum(distribution.values())
    average = sum(star * n for star, n in distribution.items()) / total if total else 0
    return {
        "total_reviews": total,
        "average_rating": round(average, 1),
        "rating_distribution": distribution,
    }


def user_reviews(db: Session, user_id: int, page: int = 1, page_size: int = 10) -> Tuple[List[Review], int]:
    query = db.query(Review).filter(Review.user_id == user_id)
    total = query.count()
    items = (
        query.order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def update_review(
    db: Session, user: User, review_id: int, changes: dict, files: Optional[List[UploadFile]] = None
) -> Review:
    review = db.query(Review).filter(Review.id == review_id, Review.user_id == user.id).first()
    if not review:
        raise NotFoundError("Review not found")
    if changes.get("rating") is not None:
        review.rating = changes["rating"]
    if changes.get("comment"):
        review.comment = changes["comment"]

    # verified_purchase keeps the value captured at creation
    # New uploads replace the previous set
    replaced = []
    images = _store_images(files)
    if images:
        replaced = list(review.images or [])
        review.images = images
    db.commit()
    for url in replaced:
        delete_image(url)
    db.refresh(review)
    return review


def delete_review(db: Session, user: User, review_id: int) -> None:
    query = db.query(Review).filter(Review.id == review_id)
    if not user.is_admin:
        query = query.filter(Review.user_id == user.id)
    review = query.first()
    if not review:
        raise NotFoundError("Review not found")
    images = list(review.images or [])
    db.delete(review)
    db.commit()
    for url in images:
        delete_image(url)


def mark_helpful(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if not review:
        raise NotFoundError("Review not found")
    review.helpful_count = (review.helpful_count or 0) + 1
    db.commit()
    db.refresh(review)
    return review


def all_reviews(
    db: Session, status: Optional[str] = None, rating: Optional[int] = None, page: int = 1, page_size: int = 20
) -> Tuple[List[Review], int]:
    query = db.query(Review)
    if status:
        query = query.filter(Review.status == status)
    if rating:
        query = query.filter(Review.rating == rating)
    total = query.count()
    items = (
        query.order_by(Review.created_at.desc(), Review.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def set_review_status(db: Session, review_id: int, status: str) -> Review:
    if status not in {s.value for s in ReviewStatus}:
        raise InvalidError("Invalid status")
    review = db.get(Review, review_id)
    if not review:
        raise NotFoundError("Review not found")
    review.status = status
    db.commit()
    db.refresh(review)
    return review
