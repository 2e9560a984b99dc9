# backend/routes/reviews.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import ApiResponse, Page, ok, page_of
from schemas.review import ReviewOut, ReviewStatusPatch, ProductReviews, ReviewStats
from services import reviews as review_service
from utils.audit import write_log
from utils.tokenJWT import get_current_user, admin_required

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get("/product/{product_id}", response_model=ApiResponse[ProductReviews])
def product_reviews(
    product_id: int,
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    result = review_service.product_reviews(db, product_id, rating, page, page_size)
    data = {
        "reviews": page_of(result["items"], result["total"], page, page_size),
        "average_rating": result["average_rating"],
        "total_reviews": result["total_reviews"],
    }
    return ok(data, "Reviews fetched successfully")


@router.get("/product/{product_id}/stats", response_model=ApiResponse[ReviewStats])
def review_stats(product_id: int, db: Session = Depends(get_db)):
    return ok(review_service.review_stats(db, product_id), "Review statistics fetched successfully")


@router.post("", response_model=ApiResponse[ReviewOut], status_code=status.HTTP_201_CREATED)
def create_review(
    request: Request,
    product_id: int = Form(...),
    rating: int = Form(..., ge=1, le=5),
    comment: str = Form(..., min_length=1),
    images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    review = review_service.create_review(db, current_user, product_id, rating, comment, images)
    write_log(db, user_id=current_user.id, action="REVIEW_CREATE", resource="reviews", request=request,
              meta={"review_id": review.id, "product_id": product_id, "verified": review.verified_purchase})
    return ok(review, "Review created successfully", 201)


@router.get("/my-reviews", response_model=ApiResponse[Page[ReviewOut]])
def my_reviews(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = review_service.user_reviews(db, current_user.id, page, page_size)
    return ok(page_of(items, total, page, page_size), "Reviews fetched successfully")


# Admin: every review, any status
@router.get("/admin/all", response_model=ApiResponse[Page[ReviewOut]])
def all_reviews(
    status_filter: Optional[str] = Query(None, alias="status"),
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    items, total = review_service.all_reviews(db, status_filter, rating, page, page_size)
    return ok(page_of(items, total, page, page_size), "Reviews fetched successfully")


@router.put("/{review_id}", response_model=ApiResponse[ReviewOut])
def update_review(
    review_id: int,
    request: Request,
    rating: Optional[int] = Form(None, ge=1, le=5),
    comment: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = {"rating": rating, "comment": comment}
    review = review_service.update_review(db, current_user, review_id, changes, images)
    write_log(db, user_id=current_user.id, action="REVIEW_UPDATE", resource="reviews",
              request=request, meta={"review_id": review_id})
    return ok(review, "Review updated successfully")


@router.delete("/{review_id}", response_model=ApiResponse[dict])
def delete_review(
    review_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    review_service.delete_review(db, current_user, review_id)
    write_log(db, user_id=current_user.id, action="REVIEW_DELETE", resource="reviews",
              request=request, meta={"review_id": review_id})
    return ok({}, "Review deleted successfully")


@router.post("/{review_id}/helpful", response_model=ApiResponse[ReviewOut])
def mark_helpful(review_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(review_service.mark_helpful(db, review_id), "Review marked as helpful")


@router.patch("/{review_id}/status", response_model=ApiResponse[ReviewOut])
def update_review_status(
    review_id: int,
    payload: ReviewStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    review = review_service.set_review_status(db, review_id, payload.status)
    write_log(db, user_id=current_user.id, action="REVIEW_STATUS", resource="reviews",
              request=request, meta={"review_id": review_id, "status": payload.status})
    return ok(review, "Review status updated successfully")
