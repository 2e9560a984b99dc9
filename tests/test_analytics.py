"""Admin analytics over placed orders and catalog stock."""
import pytest

from services import analytics
from services import cart as cart_service
from services import orders as order_service


@pytest.fixture
def place(db, customer, make_address):
    address = make_address(customer, is_default=True)

    def _place(product, quantity=1, status=None):
        cart_service.add_item(db, customer.id, product.id, quantity)
        order = order_service.create_order(db, customer, address.id, "cod")
        if status:
            order = order_service.update_order_status(db, order.id, status)
        return order
    return _place


class TestSales:

    def test_only_sale_statuses_counted(self, db, make_product, place):
        product = make_product(price=100, stock=20)
        confirmed = place(product, status="confirmed")
        place(product)  # still pending

        series = analytics.sales_series(db, period_days=7, group_by="day")

        assert len(series) == 1
        assert series[0]["total_orders"] == 1
        assert series[0]["total_sales"] == confirmed.final_amount
        assert series[0]["average_order_value"] == confirmed.final_amount

    def test_empty_series(self, db):
        assert analytics.sales_series(db, group_by="month") == []

    def test_top_products_by_quantity(self, db, make_product, place):
        slow = make_product(price=10, stock=20)
        fast = make_product(price=10, stock=20)
        place(slow, 1, status="delivered")
        place(fast, 4, status="shipped")

        top = analytics.top_products(db, limit=2)

        assert [t["product_id"] for t in top] == [fast.id, slow.id]
        assert top[0]["total_quantity_sold"] == 4
        assert top[0]["current_stock"] == 16

    def test_status_distribution(self, db, make_product, place):
        product = make_product(stock=20)
        place(product)
        place(product)
        place(product, status="shipped")

        buckets = {b["status"]: b["count"] for b in analytics.order_status_distribution(db)}
        assert buckets == {"pending": 2, "shipped": 1}


class TestInventory:

    def test_low_and_out_of_stock(self, db, make_product):
        low = make_product(stock=3)
        make_product(stock=50)
        empty = make_product(stock=0)

        alerts = analytics.inventory_alerts(db, threshold=5)

        assert [p.id for p in alerts["low_stock_products"]] == [low.id]
        assert [p.id for p in alerts["out_of_stock_products"]] == [empty.id]
        assert alerts["low_stock_count"] == 1
        assert alerts["out_of_stock_count"] == 1


class TestOverview:

    def test_counts(self, db, admin, customer, make_product, place):
        product = make_product(price=100, stock=5)
        order = place(product, status="delivered")

        overview = analytics.dashboard_overview(db)

        assert overview["total_customers"] == 1
        assert overview["total_orders"] == 1
        assert overview["sales_orders"] == 1
        assert overview["total_sales"] == order.final_amount
        assert overview["recent_orders"][0]["order_number"] == order.order_number
        assert [p["id"] for p in overview["low_stock_products"]] == [product.id]
