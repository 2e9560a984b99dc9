"""Product reviews: one per user, verified purchase flag, aggregates."""
import pytest

from services import cart as cart_service
from services import orders as order_service
from services import reviews as review_service
from utils.errors import ConflictError, NotFoundError


class TestCreate:

    def test_second_review_conflicts(self, db, customer, make_product):
        product = make_product()
        review_service.create_review(db, customer, product.id, 4, "Good")
        with pytest.raises(ConflictError, match="already reviewed"):
            review_service.create_review(db, customer, product.id, 5, "Even better")

    def test_missing_product_not_found(self, db, customer):
        with pytest.raises(NotFoundError, match="Product not found"):
            review_service.create_review(db, customer, 999, 4, "Ghost")

    def test_unverified_without_delivered_order(self, db, customer, make_product):
        product = make_product()
        review = review_service.create_review(db, customer, product.id, 3, "Okay")
        assert review.verified_purchase is False
        assert review.status == "approved"

    def test_verified_after_delivery(self, db, customer, make_product, make_address):
        product = make_product()
        address = make_address(customer)
        cart_service.add_item(db, customer.id, product.id, 1)
        order = order_service.create_order(db, customer, address.id, "cod")
        order_service.update_order_status(db, order.id, "delivered")

        review = review_service.create_review(db, customer, product.id, 5, "Arrived fine")
        assert review.verified_purchase is True


class TestAggregates:

    def test_average_and_distribution(self, db, make_user, make_product):
        product = make_product()
        for rating in (5, 4, 4, 1):
            review_service.create_review(db, make_user(), product.id, rating, "Review")

        stats = review_service.review_stats(db, product.id)
        assert stats["total_reviews"] == 4
        assert stats["average_rating"] == 3.5
        assert stats["rating_distribution"] == {1: 1, 2: 0, 3: 0, 4: 2, 5: 1}

        page = review_service.product_reviews(db, product.id, rating=4)
        assert page["total"] == 2
        assert page["total_reviews"] == 4
        assert page["average_rating"] == 3.5

    def test_rejected_reviews_excluded(self, db, make_user, make_product):
        product = make_product()
        keep = review_service.create_review(db, make_user(), product.id, 5, "Great")
        hide = review_service.create_review(db, make_user(), product.id, 1, "Spam")
        review_service.set_review_status(db, hide.id, "rejected")

        page = review_service.product_reviews(db, product.id)
        assert [r.id for r in page["items"]] == [keep.id]
        assert page["average_rating"] == 5.0


class TestMutations:

    def test_helpful_increments(self, db, customer, make_product):
        review = review_service.create_review(db, customer, make_product().id, 4, "Nice")
        review_service.mark_helpful(db, review.id)
        assert review_service.mark_helpful(db, review.id).helpful_count == 2

    def test_owner_updates_rating(self, db, customer, make_product):
        review = review_service.create_review(db, customer, make_product().id, 2, "Meh")
        updated = review_service.update_review(db, customer, review.id, {"rating": 4, "comment": "Grew on me"})
        assert (updated.rating, updated.comment) == (4, "Grew on me")

    def test_other_customer_cannot_update_or_delete(self, db, customer, make_user, make_product):
        review = review_service.create_review(db, customer, make_product().id, 4, "Mine")
        stranger = make_user()
        with pytest.raises(NotFoundError):
            review_service.update_review(db, stranger, review.id, {"rating": 1})
        with pytest.raises(NotFoundError):
            review_service.delete_review(db, stranger, review.id)

    def test_admin_deletes_any_review(self, db, customer, admin, make_product):
        review = review_service.create_review(db, customer, make_product().id, 4, "Mine")
        review_service.delete_review(db, admin, review.id)
        items, total = review_service.user_reviews(db, customer.id)
        assert total == 0

    def test_verified_flag_not_reevaluated_on_update(self, db, customer, make_product, make_address):
        product = make_product()
        review = review_service.create_review(db, customer, product.id, 3, "Bought elsewhere")
        assert review.verified_purchase is False

        address = make_address(customer)
        cart_service.add_item(db, customer.id, product.id, 1)
        order = order_service.create_order(db, customer, address.id, "cod")
        order_service.update_order_status(db, order.id, "delivered")
        assert review_service.has_delivered_purchase(db, customer.id, product.id) is True

        updated = review_service.update_review(db, customer, review.id, {"rating": 5, "comment": "Now owned"})
        assert updated.rating == 5
        assert updated.verified_purchase is False
