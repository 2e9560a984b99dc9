# backend/services/catalog.py
import logging
from typing import List, Optional, Tuple

from fastapi import UploadFile
from slugify import slugify
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from models.category import Category, CategoryStatus
from models.product import Product, ProductStatus
from utils.errors import NotFoundError, InvalidError, ConflictError
from utils.storage import save_image, delete_image

logger = logging.getLogger(__name__)

PRODUCT_SORTS = {
    "newest": Product.created_at.desc(),
    "oldest": Product.created_at.asc(),
    "price_asc": Product.price.asc(),
    "price_desc": Product.price.desc(),
    "name": Product.name.asc(),
}


def _paginate(query, page: int, page_size: int) -> Tuple[list, int]:
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return items, total


def _search_filter(term: str):
    like = f"%{term}%"
    return or_(Product.name.ilike(like), Product.description.ilike(like), Product.sku.ilike(like))


# ---- PRODUCTS ----

def list_products(
    db: Session,
    *,
    category_id: Optional[int] = None,
    status: Optional[str] = None,
    featured: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None,
    sort: str = "newest",
    page: int = 1,
    page_size: int = 10,
) -> Tuple[List[Product], int]:
    query = db.query(Product)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if status:
        query = query.filter(Product.status == status)
    if featured is not None:
        query = query.filter(Product.featured.is_(featured))
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if search:
        query = query.filter(_search_filter(search))

    query = query.order_by(PRODUCT_SORTS.get(sort, PRODUCT_SORTS["newest"]), Product.id.desc())
    return _paginate(query, page, page_size)


def featured_products(db: Session, limit: int = 8) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.featured.is_(True), Product.status == ProductStatus.ACTIVE.value)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
        .all()
    )


def search_products(db: Session, term: str, page: int = 1, page_size: int = 10) -> Tuple[List[Product], int]:
    if not term or not term.strip():
        raise InvalidError("Search query is required")
    query = (
        db.query(Product)
        .filter(Product.status == ProductStatus.ACTIVE.value, _search_filter(term.strip()))
        .order_by(Product.name.asc())
    )
    return _paginate(query, page, page_size)


def products_by_category(db: Session, category_id: int, page: int = 1, page_size: int = 10) -> Tuple[List[Product], int]:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")

    # Direct subcategories are listed together with their parent
    ids = [category.id] + [c.id for c in category.children]
    query = (
        db.query(Product)
        .filter(Product.category_id.in_(ids), Product.status == ProductStatus.ACTIVE.value)
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    return _paginate(query, page, page_size)


def get_product(db: Session, identifier: str) -> Product:
    """Look a product up by numeric id or by slug."""
    if str(identifier).isdigit():
        product = db.get(Product, int(identifier))
    else:
        product = db.query(Product).filter(Product.slug == identifier).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def _check_category(db: Session, category_id: int) -> None:
    if not db.get(Category, category_id):
        raise NotFoundError("Category not found")


def _check_discount(price: float, discount_price: Optional[float]) -> None:
    if discount_price is not None and discount_price > price:
        raise InvalidError("Discount price cannot exceed the price")


def create_product(db: Session, data: dict) -> Product:
    _check_category(db, data["category_id"])
    _check_discount(data["price"], data.get("discount_price"))
    if db.query(Product).filter(Product.sku == data["sku"]).first():
        raise ConflictError("Product with this SKU already exists")

    product = Product(**data)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product %s created (sku=%s)", product.id, product.sku)
    return product


def update_product(db: Session, product_id: int, changes: dict) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")

    if "category_id" in changes:
        _check_category(db, changes["category_id"])
    if "sku" in changes and changes["sku"] != product.sku:
        if db.query(Product).filter(Product.sku == changes["sku"]).first():
            raise ConflictError("Product with this SKU already exists")
    _check_discount(changes.get("price", product.price), changes.get("discount_price", product.discount_price))

    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> None:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    images = list(product.images or [])
    db.delete(product)
    db.commit()
    for url in images:
        delete_image(url)


def update_stock(db: Session, product_id: int, stock_quantity: int) -> Product:
    if stock_quantity < 0:
        raise InvalidError("Stock quantity cannot be negative")
    product = db.query(Product).filter(Product.id == product_id).with_for_update().first()
    if not product:
        raise NotFoundError("Product not found")
    product.stock_quantity = stock_quantity
    db.commit()
    db.refresh(product)
    return product


def add_product_images(db: Session, product_id: int, files: List[UploadFile]) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    if not files:
        raise InvalidError("No images uploaded")

    urls = [save_image(f, "products") for f in files]
    # JSON columns only detect reassignment
    product.images = list(product.images or []) + urls
    db.commit()
    db.refresh(product)
    return product


# ---- CATEGORIES ----

def _product_counts(db: Session, active_only: bool = True) -> dict:
    query = db.query(Product.category_id, func.count(Product.id))
    if active_only:
        query = query.filter(Product.status == ProductStatus.ACTIVE.value)
    return dict(query.group_by(Product.category_id).all())


def _category_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "parent_id": category.parent_id,
        "image": category.image,
        "status": category.status,
        "description": category.description,
        "created_at": category.created_at,
    }


def _build_tree(categories: List[Category], counts: Optional[dict]) -> List[dict]:
    nodes = {}
    for c in categories:
        node = _category_dict(c)
        node["children"] = []
        if counts is not None:
            node["product_count"] = counts.get(c.id, 0)
        nodes[c.id] = node

    roots = []
    for c in categories:
        parent = nodes.get(c.parent_id)
        if parent is not None:
            parent["children"].append(nodes[c.id])
        else:
            roots.append(nodes[c.id])
    return roots


def list_categories(db: Session, status: Optional[str] = None, include_counts: bool = False) -> List[dict]:
    query = db.query(Category)
    if status:
        query = query.filter(Category.status == status)
    categories = query.order_by(Category.name.asc()).all()
    counts = _product_counts(db) if include_counts else None
    return _build_tree(categories, counts)


def category_tree(db: Session) -> List[dict]:
    categories = (
        db.query(Category)
        .filter(Category.status == CategoryStatus.ACTIVE.value)
        .order_by(Category.name.asc())
        .all()
    )
    return _build_tree(categories, None)


def popular_categories(db: Session, limit: int = 6) -> List[dict]:
    counts = _product_counts(db)
    categories = db.query(Category).filter(Category.status == CategoryStatus.ACTIVE.value).all()
    ranked = sorted(categories, key=lambda c: (-counts.get(c.id, 0), c.name))[:limit]
    result = []
    for c in ranked:
        item = _category_dict(c)
        item["product_count"] = counts.get(c.id, 0)
        result.append(item)
    return result


def get_category(db: Session, identifier: str) -> dict:
    if str(identifier).isdigit():
        category = db.get(Category, int(identifier))
    else:
        category = db.query(Category).filter(Category.slug == identifier).first()
    if not category:
        raise NotFoundError("Category not found")

    subcategories = (
        db.query(Category)
        .filter(Category.parent_id == category.id, Category.status == CategoryStatus.ACTIVE.value)
        .order_by(Category.name.asc())
        .all()
    )
    product_count = (
        db.query(Product)
        .filter(Product.category_id == category.id, Product.status == ProductStatus.ACTIVE.value)
        .count()
    )
    detail = _category_dict(category)
    detail["subcategories"] = [_category_dict(c) for c in subcategories]
    detail["product_count"] = product_count
    return detail


def _check_name_free(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Category).filter(Category.slug == slugify(name))
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError("Category with this name already exists")


def create_category(db: Session, data: dict) -> Category:
    if data.get("parent_id") is not None and not db.get(Category, data["parent_id"]):
        raise NotFoundError("Parent category not found")
    _check_name_free(db, data["name"])

    category = Category(**data)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, changes: dict) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")

    parent_id = changes.get("parent_id")
    if parent_id is not None:
        if parent_id == category.id:
            raise InvalidError("Category cannot be its own parent")
        if not db.get(Category, parent_id):
            raise NotFoundError("Parent category not found")
    if changes.get("name"):
        _check_name_free(db, changes["name"], exclude_id=category.id)

    for field, value in changes.items():
        setattr(category, field, value)
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int) -> None:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    if db.query(Product).filter(Product.category_id == category.id).count():
        raise InvalidError("Cannot delete category with existing products")
    if db.query(Category).filter(Category.parent_id == category.id).count():
        raise InvalidError("Cannot delete category with subcategories")

    image = category.image
    db.delete(category)
    db.commit()
    delete_image(image)
