# backend/routes/products.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import ApiResponse, Page, ok, page_of
from schemas.product import ProductCreate, ProductUpdate, ProductOut, StockUpdate
from services import catalog
from utils.audit import write_log
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/products", tags=["Products"])

SORT_PATTERN = "^(newest|oldest|price_asc|price_desc|name)$"


# =========================
# PUBLIC CATALOG
# =========================
@router.get("", response_model=ApiResponse[Page[ProductOut]])
def list_products(
    category_id: Optional[int] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    featured: Optional[bool] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None),
    sort: str = Query("newest", pattern=SORT_PATTERN),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = catalog.list_products(
        db,
        category_id=category_id,
        status=status_filter,
        featured=featured,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort=sort,
        page=page,
        page_size=page_size,
    )
    return ok(page_of(items, total, page, page_size), "Products fetched successfully")


@router.get("/featured", response_model=ApiResponse[List[ProductOut]])
def featured_products(limit: int = Query(8, ge=1, le=50), db: Session = Depends(get_db)):
    return ok(catalog.featured_products(db, limit), "Featured products fetched successfully")


@router.get("/search", response_model=ApiResponse[Page[ProductOut]])
def search_products(
    q: str = Query(""),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = catalog.search_products(db, q, page, page_size)
    return ok(page_of(items, total, page, page_size), "Search results fetched successfully")


@router.get("/category/{category_id}", response_model=ApiResponse[Page[ProductOut]])
def products_by_category(
    category_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = catalog.products_by_category(db, category_id, page, page_size)
    return ok(page_of(items, total, page, page_size), "Products fetched successfully")


# Accepts a numeric id or a slug
@router.get("/{identifier}", response_model=ApiResponse[ProductOut])
def get_product(identifier: str, db: Session = Depends(get_db)):
    return ok(catalog.get_product(db, identifier), "Product fetched successfully")


# =========================
# ADMIN
# =========================
@router.post("", response_model=ApiResponse[ProductOut], status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = catalog.create_product(db, payload.model_dump())
    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              request=request, meta={"product_id": product.id, "sku": product.sku})
    return ok(product, "Product created successfully", 201)


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    product = catalog.update_product(db, product_id, changes)
    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              request=request, meta={"product_id": product_id, "fields": sorted(changes)})
    return ok(product, "Product updated successfully")


@router.delete("/{product_id}", response_model=ApiResponse[dict])
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    catalog.delete_product(db, product_id)
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              request=request, meta={"product_id": product_id})
    return ok({}, "Product deleted successfully")


@router.patch("/{product_id}/stock", response_model=ApiResponse[ProductOut])
def update_stock(
    product_id: int,
    payload: StockUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = catalog.update_stock(db, product_id, payload.stock_quantity)
    write_log(db, user_id=current_user.id, action="STOCK_UPDATE", resource="products",
              request=request, meta={"product_id": product_id, "stock_quantity": payload.stock_quantity})
    return ok(product, "Stock updated successfully")


@router.post("/{product_id}/images", response_model=ApiResponse[ProductOut])
def upload_images(
    product_id: int,
    request: Request,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = catalog.add_product_images(db, product_id, files)
    write_log(db, user_id=current_user.id, action="PRODUCT_IMAGES", resource="products",
              request=request, meta={"product_id": product_id, "count": len(files)})
    return ok(product, "Images uploaded successfully")
