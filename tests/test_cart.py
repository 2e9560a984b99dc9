"""Cart aggregate: merging, stock checks, derived totals, reconciliation."""
import pytest

from services import cart as cart_service
from utils.errors import InvalidError, NotFoundError


class TestAddItem:

    def test_same_product_twice_merges_into_one_line(self, db, customer, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 2)
        cart = cart_service.add_item(db, customer.id, product.id, 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_merge_exceeding_stock_rejected_and_line_unchanged(self, db, customer, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 3)
        with pytest.raises(InvalidError, match="Insufficient stock"):
            cart_service.add_item(db, customer.id, product.id, 3)
        db.rollback()
        cart = cart_service.get_cart(db, customer.id)
        assert cart.items[0].quantity == 3

    def test_quantity_above_stock_rejected(self, db, customer, make_product):
        product = make_product(stock=1)
        with pytest.raises(InvalidError):
            cart_service.add_item(db, customer.id, product.id, 2)

    def test_inactive_product_rejected(self, db, customer, make_product):
        product = make_product(status="inactive")
        with pytest.raises(InvalidError, match="not available"):
            cart_service.add_item(db, customer.id, product.id, 1)

    def test_missing_product_not_found(self, db, customer):
        with pytest.raises(NotFoundError, match="Product"):
            cart_service.add_item(db, customer.id, 999, 1)

    def test_snapshot_uses_effective_price(self, db, customer, make_product):
        product = make_product(price=200, discount_price=150)
        cart = cart_service.add_item(db, customer.id, product.id, 1)
        assert cart.items[0].price == 150


class TestTotals:

    def test_totals_follow_every_mutation(self, db, customer, make_product):
        a = make_product(price=10.5, stock=10)
        b = make_product(price=3, stock=10)

        cart = cart_service.add_item(db, customer.id, a.id, 2)
        cart = cart_service.add_item(db, customer.id, b.id, 4)
        assert cart.total_items == 6
        assert cart.total_amount == pytest.approx(10.5 * 2 + 3 * 4)

        cart = cart_service.update_item(db, customer.id, a.id, 1)
        assert cart.total_amount == pytest.approx(10.5 + 12)

        cart = cart_service.remove_item(db, customer.id, b.id)
        assert cart.total_amount == pytest.approx(10.5)

        cart = cart_service.clear_cart(db, customer.id)
        assert cart.total_items == 0
        assert cart.total_amount == 0

    def test_summary(self, db, customer, make_product):
        product = make_product(price=20)
        cart_service.add_item(db, customer.id, product.id, 3)
        assert cart_service.cart_summary(db, customer.id) == {
            "total_items": 3, "total_amount": 60, "items_count": 1,
        }

    def test_summary_without_cart(self, db, customer):
        assert cart_service.cart_summary(db, customer.id)["total_items"] == 0


class TestMissingCart:

    def test_update_without_cart(self, db, customer, make_product):
        product = make_product()
        with pytest.raises(NotFoundError, match="Cart not found"):
            cart_service.update_item(db, customer.id, product.id, 1)

    def test_update_missing_line(self, db, customer, make_product):
        a = make_product()
        b = make_product()
        cart_service.add_item(db, customer.id, a.id, 1)
        with pytest.raises(NotFoundError, match="Item not found"):
            cart_service.update_item(db, customer.id, b.id, 1)

    def test_remove_without_cart(self, db, customer):
        with pytest.raises(NotFoundError):
            cart_service.remove_item(db, customer.id, 1)

    def test_clear_without_cart(self, db, customer):
        with pytest.raises(NotFoundError):
            cart_service.clear_cart(db, customer.id)


class TestReconciliation:

    def test_get_drops_inactive_products(self, db, customer, make_product):
        keep = make_product()
        drop = make_product()
        cart_service.add_item(db, customer.id, keep.id, 1)
        cart_service.add_item(db, customer.id, drop.id, 1)

        drop.status = "inactive"
        db.commit()

        cart = cart_service.get_cart(db, customer.id)
        assert [i.product_id for i in cart.items] == [keep.id]

    def test_get_creates_cart_lazily(self, db, customer):
        cart = cart_service.get_cart(db, customer.id)
        assert cart.user_id == customer.id
        assert cart.items == []


class TestSyncPrices:

    def test_empty_cart(self, db, customer):
        _, message = cart_service.sync_prices(db, customer.id)
        assert message == "Cart is empty"

    def test_up_to_date(self, db, customer, make_product):
        product = make_product(price=40)
        cart_service.add_item(db, customer.id, product.id, 1)
        _, message = cart_service.sync_prices(db, customer.id)
        assert message == "Cart prices are up to date"

    def test_price_change_updates_snapshot(self, db, customer, make_product):
        product = make_product(price=40)
        cart_service.add_item(db, customer.id, product.id, 2)
        product.discount_price = 30
        db.commit()

        cart, message = cart_service.sync_prices(db, customer.id)
        assert message == "Cart prices updated"
        assert cart.items[0].price == 30
        assert cart.total_amount == 60
