"""Catalog rules: product availability, slugs, category hierarchy."""
import pytest

from models.product import Product
from services import catalog
from utils.errors import ConflictError, InvalidError, NotFoundError


class TestProductAvailability:

    def test_zero_stock_forces_out_of_stock_on_save(self, db, make_product):
        product = make_product(stock=5)
        product.stock_quantity = 0
        db.commit()
        db.refresh(product)
        assert product.status == "out_of_stock"

    def test_created_with_zero_stock_is_out_of_stock(self, make_product):
        product = make_product(stock=0)
        assert product.status == "out_of_stock"

    def test_replenished_product_becomes_active(self, db, make_product):
        product = make_product(stock=0)
        product.stock_quantity = 4
        db.commit()
        db.refresh(product)
        assert product.status == "active"

    def test_inactive_product_stays_inactive_when_restocked(self, db, make_product):
        product = make_product(stock=3, status="inactive")
        product.stock_quantity = 8
        db.commit()
        db.refresh(product)
        assert product.status == "inactive"


class TestEffectivePrice:

    def test_lower_discount_price_wins(self, make_product):
        assert make_product(price=100, discount_price=80).effective_price == 80

    def test_higher_discount_price_ignored(self, make_product):
        assert make_product(price=100, discount_price=120).effective_price == 100

    def test_no_discount_uses_price(self, make_product):
        assert make_product(price=55.5).effective_price == 55.5


class TestProductCrud:

    def _payload(self, category_id, **overrides):
        data = {
            "name": "Wireless Headphones",
            "sku": "WH001",
            "description": "Premium wireless headphones",
            "price": 15999,
            "discount_price": 12999,
            "category_id": category_id,
            "stock_quantity": 100,
            "status": "active",
            "featured": True,
            "tags": ["audio"],
            "specifications": None,
        }
        data.update(overrides)
        return data

    def test_create_derives_slug(self, db, category):
        product = catalog.create_product(db, self._payload(category.id))
        assert product.slug == "wireless-headphones-wh001"

    def test_duplicate_sku_conflicts(self, db, category):
        catalog.create_product(db, self._payload(category.id))
        with pytest.raises(ConflictError, match="SKU"):
            catalog.create_product(db, self._payload(category.id, name="Other"))

    def test_unknown_category_not_found(self, db, category):
        with pytest.raises(NotFoundError, match="Category"):
            catalog.create_product(db, self._payload(category.id + 100))

    def test_discount_above_price_rejected(self, db, category):
        with pytest.raises(InvalidError):
            catalog.create_product(db, self._payload(category.id, discount_price=20000))

    def test_get_by_id_or_slug(self, db, category):
        created = catalog.create_product(db, self._payload(category.id))
        assert catalog.get_product(db, str(created.id)).id == created.id
        assert catalog.get_product(db, created.slug).id == created.id

    def test_get_missing_product(self, db):
        with pytest.raises(NotFoundError):
            catalog.get_product(db, "999")

    def test_update_stock_to_zero(self, db, make_product):
        product = make_product(stock=3)
        updated = catalog.update_stock(db, product.id, 0)
        assert updated.stock_quantity == 0
        assert updated.status == "out_of_stock"

    def test_delete_product(self, db, make_product):
        product = make_product()
        catalog.delete_product(db, product.id)
        assert db.get(Product, product.id) is None


class TestProductListing:

    def test_filters_and_paging(self, db, make_product):
        make_product(price=10, name="Cheap Mug")
        make_product(price=500, name="Fancy Lamp")
        make_product(price=900, name="Fancy Chair")

        items, total = catalog.list_products(db, search="fancy", sort="price_asc", page=1, page_size=1)
        assert total == 2
        assert [p.name for p in items] == ["Fancy Lamp"]

        items, total = catalog.list_products(db, min_price=100, max_price=600)
        assert total == 1

    def test_search_requires_term(self, db):
        with pytest.raises(InvalidError):
            catalog.search_products(db, "  ")

    def test_search_only_returns_active(self, db, make_product):
        make_product(name="Blue Kettle")
        make_product(name="Blue Toaster", status="inactive")
        items, total = catalog.search_products(db, "blue")
        assert total == 1
        assert items[0].name == "Blue Kettle"


class TestCategories:

    def test_tree_nests_children(self, db, category):
        catalog.create_category(db, {"name": "Phones", "parent_id": category.id})
        tree = catalog.category_tree(db)
        assert len(tree) == 1
        assert tree[0]["slug"] == "electronics"
        assert [c["name"] for c in tree[0]["children"]] == ["Phones"]

    def test_missing_parent_rejected(self, db):
        with pytest.raises(NotFoundError, match="Parent"):
            catalog.create_category(db, {"name": "Orphan", "parent_id": 42})

    def test_duplicate_name_conflicts(self, db, category):
        with pytest.raises(ConflictError):
            catalog.create_category(db, {"name": "Electronics"})

    def test_cannot_be_own_parent(self, db, category):
        with pytest.raises(InvalidError, match="own parent"):
            catalog.update_category(db, category.id, {"parent_id": category.id})

    def test_delete_refused_with_products(self, db, category, make_product):
        make_product()
        with pytest.raises(InvalidError, match="products"):
            catalog.delete_category(db, category.id)

    def test_delete_refused_with_subcategories(self, db, category):
        catalog.create_category(db, {"name": "Laptops", "parent_id": category.id})
        with pytest.raises(InvalidError, match="subcategories"):
            catalog.delete_category(db, category.id)

    def test_detail_counts_active_products(self, db, category, make_product):
        make_product()
        make_product(status="inactive")
        detail = catalog.get_category(db, "electronics")
        assert detail["product_count"] == 1

    def test_popular_orders_by_product_count(self, db, category, make_product):
        catalog.create_category(db, {"name": "Books"})
        make_product()
        popular = catalog.popular_categories(db)
        assert popular[0]["name"] == "Electronics"
        assert popular[0]["product_count"] == 1
