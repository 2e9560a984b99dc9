# backend/routes/categories.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.category import CategoryCreate, CategoryUpdate, CategoryOut, CategoryNode, CategoryDetail
from schemas.common import ApiResponse, ok
from services import catalog
from utils.audit import write_log
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=ApiResponse[List[CategoryNode]])
def list_categories(
    status_filter: Optional[str] = Query(None, alias="status"),
    include_counts: bool = Query(False),
    db: Session = Depends(get_db),
):
    return ok(catalog.list_categories(db, status_filter, include_counts), "Categories fetched successfully")


@router.get("/tree", response_model=ApiResponse[List[CategoryNode]])
def category_tree(db: Session = Depends(get_db)):
    return ok(catalog.category_tree(db), "Category tree fetched successfully")


@router.get("/popular", response_model=ApiResponse[List[CategoryNode]])
def popular_categories(limit: int = Query(6, ge=1, le=50), db: Session = Depends(get_db)):
    return ok(catalog.popular_categories(db, limit), "Popular categories fetched successfully")


@router.get("/{identifier}", response_model=ApiResponse[CategoryDetail])
def get_category(identifier: str, db: Session = Depends(get_db)):
    return ok(catalog.get_category(db, identifier), "Category fetched successfully")


@router.post("", response_model=ApiResponse[CategoryOut], status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    category = catalog.create_category(db, payload.model_dump())
    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              request=request, meta={"category_id": category.id})
    return ok(category, "Category created successfully", 201)


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    category = catalog.update_category(db, category_id, changes)
    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              request=request, meta={"category_id": category_id})
    return ok(category, "Category updated successfully")


@router.delete("/{category_id}", response_model=ApiResponse[dict])
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    catalog.delete_category(db, category_id)
    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              request=request, meta={"category_id": category_id})
    return ok({}, "Category deleted successfully")
