"""Wishlist membership and moving items into the cart."""
import pytest

from services import cart as cart_service
from services import wishlist as wishlist_service
from utils.errors import ConflictError, InvalidError, NotFoundError


class TestMembership:

    def test_add_and_check(self, db, customer, make_product):
        product = make_product()
        wishlist = wishlist_service.add_item(db, customer.id, product.id)
        assert [i.product_id for i in wishlist.items] == [product.id]
        assert wishlist_service.is_in_wishlist(db, customer.id, product.id) is True
        assert wishlist_service.wishlist_summary(db, customer.id) == {"total_items": 1}

    def test_duplicate_conflicts(self, db, customer, make_product):
        product = make_product()
        wishlist_service.add_item(db, customer.id, product.id)
        with pytest.raises(ConflictError, match="already exists"):
            wishlist_service.add_item(db, customer.id, product.id)

    def test_inactive_product_rejected(self, db, customer, make_product):
        product = make_product(status="inactive")
        with pytest.raises(InvalidError):
            wishlist_service.add_item(db, customer.id, product.id)

    def test_remove_without_wishlist_not_found(self, db, customer):
        with pytest.raises(NotFoundError, match="Wishlist not found"):
            wishlist_service.remove_item(db, customer.id, 1)

    def test_get_drops_unavailable_products(self, db, customer, make_product):
        keep = make_product()
        drop = make_product()
        wishlist_service.add_item(db, customer.id, keep.id)
        wishlist_service.add_item(db, customer.id, drop.id)
        drop.status = "inactive"
        db.commit()

        wishlist = wishlist_service.get_wishlist(db, customer.id)
        assert [i.product_id for i in wishlist.items] == [keep.id]


class TestMoveToCart:

    def test_moves_item(self, db, customer, make_product):
        product = make_product(price=40, stock=5)
        wishlist_service.add_item(db, customer.id, product.id)

        result = wishlist_service.move_to_cart(db, customer.id, product.id, 2)

        assert result["wishlist"].items == []
        assert [(i.product_id, i.quantity) for i in result["cart"].items] == [(product.id, 2)]
        assert result["cart"].total_amount == 80

    def test_merges_with_existing_cart_line(self, db, customer, make_product):
        product = make_product(stock=5)
        cart_service.add_item(db, customer.id, product.id, 1)
        wishlist_service.add_item(db, customer.id, product.id)
        result = wishlist_service.move_to_cart(db, customer.id, product.id, 2)
        assert result["cart"].items[0].quantity == 3

    def test_quantity_above_stock_keeps_wishlist(self, db, customer, make_product):
        product = make_product(stock=1)
        wishlist_service.add_item(db, customer.id, product.id)
        with pytest.raises(InvalidError, match="Only 1 items available"):
            wishlist_service.move_to_cart(db, customer.id, product.id, 2)
        db.rollback()
        assert wishlist_service.is_in_wishlist(db, customer.id, product.id) is True
        assert cart_service.find_cart(db, customer.id) is None
