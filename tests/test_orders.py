"""Order placement, stock bookkeeping and the status lifecycle."""
import re

import pytest

from models.order import Order
from models.product import Product
from services import cart as cart_service
from services import orders as order_service
from utils.errors import InvalidError, NotFoundError


@pytest.fixture
def address(customer, make_address):
    return make_address(customer, is_default=True)


def _place(db, user, address, **kwargs):
    return order_service.create_order(db, user, address.id, "cod", **kwargs)


class TestCreateOrder:

    def test_amounts_below_free_shipping(self, db, customer, address, make_product):
        product = make_product(price=100, stock=10)
        cart_service.add_item(db, customer.id, product.id, 2)

        order = _place(db, customer, address)

        assert order.total_amount == 200
        assert order.shipping_amount == 50
        assert order.tax_amount == 36
        assert order.discount_amount == 0
        assert order.final_amount == 286
        assert order.status == "pending"
        assert order.payment_status == "pending"

    def test_free_shipping_above_threshold(self, db, customer, address, make_product):
        product = make_product(price=300, stock=10)
        cart_service.add_item(db, customer.id, product.id, 2)
        order = _place(db, customer, address)
        assert order.shipping_amount == 0
        assert order.tax_amount == 108
        assert order.final_amount == 708

    def test_decrements_stock_and_clears_cart(self, db, customer, address, make_product):
        product = make_product(price=50, stock=5)
        cart_service.add_item(db, customer.id, product.id, 3)
        _place(db, customer, address)

        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 2
        assert cart_service.find_cart(db, customer.id).items == []

    def test_selling_last_unit_marks_out_of_stock(self, db, customer, address, make_product):
        product = make_product(stock=2)
        cart_service.add_item(db, customer.id, product.id, 2)
        _place(db, customer, address)
        db.expire_all()
        assert db.get(Product, product.id).status == "out_of_stock"

    def test_snapshots_product_and_address(self, db, customer, address, make_product):
        product = make_product(price=120, discount_price=99, stock=5, images=["uploads/a.png"])
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address, coupon_code=" welcome10 ", notes="Ring twice")

        item = order.items[0]
        assert item.product_name == product.name
        assert item.product_image == "uploads/a.png"
        assert item.price == 99
        assert item.subtotal == 99
        assert order.shipping_address["city"] == "Pune"
        assert order.coupon_code == "WELCOME10"
        assert order.notes == "Ring twice"

    def test_order_number_format(self, db, customer, address, make_product):
        product = make_product()
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address)
        assert re.match(r"^ORD\d{16}$", order.order_number)

    def test_insufficient_stock_leaves_everything_untouched(self, db, customer, address, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 3)
        product.stock_quantity = 2
        db.commit()

        with pytest.raises(InvalidError, match="Insufficient stock for .*Available: 2"):
            _place(db, customer, address)
        db.rollback()

        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 2
        assert db.query(Order).count() == 0
        cart = cart_service.find_cart(db, customer.id)
        assert [(i.product_id, i.quantity) for i in cart.items] == [(product.id, 3)]

    def test_inactive_product_rejected(self, db, customer, address, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 1)
        product.status = "inactive"
        db.commit()
        with pytest.raises(InvalidError, match="is not available"):
            _place(db, customer, address)

    def test_empty_cart_rejected(self, db, customer, address):
        with pytest.raises(InvalidError, match="Cart is empty"):
            _place(db, customer, address)

    def test_foreign_address_not_found(self, db, customer, make_user, make_address, make_product):
        theirs = make_address(make_user())
        product = make_product()
        cart_service.add_item(db, customer.id, product.id, 1)
        with pytest.raises(NotFoundError, match="Shipping address"):
            _place(db, customer, theirs)


class TestOrderAccess:

    def test_customer_cannot_see_other_orders(self, db, customer, address, make_user, make_product):
        product = make_product()
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address)
        with pytest.raises(NotFoundError):
            order_service.get_order(db, make_user(), order.id)

    def test_admin_sees_any_order(self, db, customer, admin, address, make_product):
        product = make_product()
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address)
        assert order_service.get_order(db, admin, order.id).id == order.id

    def test_user_listing_filters_by_status(self, db, customer, address, make_product):
        product = make_product(stock=10)
        for _ in range(2):
            cart_service.add_item(db, customer.id, product.id, 1)
            last = _place(db, customer, address)
        order_service.cancel_order(db, customer, last.id)

        items, total = order_service.list_user_orders(db, customer.id)
        assert total == 2
        items, total = order_service.list_user_orders(db, customer.id, status="cancelled")
        assert total == 1
        assert items[0].id == last.id


class TestCancel:

    def test_cancel_pending_restores_stock(self, db, customer, address, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 3)
        order = _place(db, customer, address)

        cancelled = order_service.cancel_order(db, customer, order.id)

        assert cancelled.status == "cancelled"
        assert cancelled.cancelled_at is not None
        assert cancelled.cancellation_reason == "Cancelled by user"
        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 5

    def test_cancel_restocks_sold_out_product(self, db, customer, address, make_product):
        product = make_product(stock=1)
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address)
        order_service.cancel_order(db, customer, order.id, reason="Changed my mind")
        db.expire_all()
        restored = db.get(Product, product.id)
        assert restored.stock_quantity == 1
        assert restored.status == "active"

    def test_cancel_delivered_rejected(self, db, customer, address, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address)
        order_service.update_order_status(db, order.id, "delivered")

        with pytest.raises(InvalidError, match="cannot be cancelled"):
            order_service.cancel_order(db, customer, order.id)
        db.expire_all()
        assert db.get(Product, product.id).stock_quantity == 4


class TestStatusUpdate:

    def test_invalid_status_rejected(self, db):
        with pytest.raises(InvalidError, match="Invalid status"):
            order_service.update_order_status(db, 1, "teleported")

    def test_missing_status_rejected(self, db):
        with pytest.raises(InvalidError, match="Status is required"):
            order_service.update_order_status(db, 1, "")

    def test_unknown_order_not_found(self, db):
        with pytest.raises(NotFoundError):
            order_service.update_order_status(db, 999, "shipped")

    def test_delivered_stamps_time_and_tracking(self, db, customer, address, make_product):
        product = make_product()
        cart_service.add_item(db, customer.id, product.id, 1)
        order = _place(db, customer, address)
        updated = order_service.update_order_status(db, order.id, "delivered", tracking_number="TRK1")
        assert updated.status == "delivered"
        assert updated.delivered_at is not None
        assert updated.tracking_number == "TRK1"


class TestStats:

    def test_counts_and_revenue(self, db, customer, address, make_product):
        product = make_product(price=100, stock=10)
        placed = []
        for _ in range(3):
            cart_service.add_item(db, customer.id, product.id, 1)
            placed.append(_place(db, customer, address))
        order_service.update_order_status(db, placed[0].id, "shipped")
        order_service.cancel_order(db, customer, placed[1].id)

        stats = order_service.order_stats(db)

        assert stats["total_orders"] == 3
        # 100 + 50 shipping + 18 tax each
        assert stats["total_revenue"] == 504
        assert stats["average_order_value"] == 168
        assert stats["pending_orders"] == 1
        assert stats["shipped_orders"] == 1
        assert stats["cancelled_orders"] == 1

    def test_empty(self, db):
        stats = order_service.order_stats(db)
        assert stats["total_orders"] == 0
        assert stats["total_revenue"] == 0
