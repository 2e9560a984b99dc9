"""Coupon validation, usage counting and status recomputation."""
from datetime import timedelta

import pytest
from sqlalchemy import update

from models.coupon import Coupon
from services import coupons as coupon_service
from utils.clock import utcnow
from utils.errors import ConflictError, InvalidError, NotFoundError


@pytest.fixture
def make_coupon(db):
    def _make(code="SAVE", discount_type="fixed", discount_value=100, **overrides):
        now = utcnow()
        data = {
            "code": code,
            "description": "Test coupon",
            "discount_type": discount_type,
            "discount_value": discount_value,
            "min_purchase_amount": 0,
            "max_discount_amount": None,
            "usage_limit": 5,
            "user_usage_limit": 1,
            "start_date": now - timedelta(days=1),
            "expiry_date": now + timedelta(days=30),
        }
        data.update(overrides)
        return coupon_service.create_coupon(db, data)
    return _make


class TestValidate:

    def test_fixed_discount_capped_at_cart_total(self, db, make_coupon):
        make_coupon(discount_value=100)
        result = coupon_service.validate_coupon(db, "SAVE", 50)
        assert result["valid"] is True
        assert result["discount_amount"] == 50
        assert result["final_amount"] == 0

    def test_percentage_discount_with_cap(self, db, make_coupon):
        make_coupon(code="TENOFF", discount_type="percentage", discount_value=10, max_discount_amount=30)
        assert coupon_service.validate_coupon(db, "tenoff", 1000)["discount_amount"] == 30
        assert coupon_service.validate_coupon(db, "tenoff", 200)["discount_amount"] == 20

    def test_discount_rounds_half_up(self, db, make_coupon):
        make_coupon(code="HALF", discount_type="percentage", discount_value=5)
        # 5% of 50 = 2.5
        assert coupon_service.validate_coupon(db, "HALF", 50)["discount_amount"] == 3

    def test_expired_window_rejected_even_with_usage_left(self, db, make_coupon):
        coupon = make_coupon()
        later = coupon.expiry_date + timedelta(seconds=1)
        with pytest.raises(InvalidError, match="expired"):
            coupon_service.validate_coupon(db, "SAVE", 500, now=later)

    def test_stale_active_status_after_expiry_rejected(self, db, make_coupon):
        coupon = make_coupon()
        # Bypass the save hook so the row keeps status=active
        db.execute(
            update(Coupon).where(Coupon.id == coupon.id).values(expiry_date=utcnow() - timedelta(hours=1))
        )
        db.commit()
        with pytest.raises(InvalidError):
            coupon_service.validate_coupon(db, "SAVE", 500)

    def test_not_yet_started_rejected(self, db, make_coupon):
        make_coupon(start_date=utcnow() + timedelta(days=2), expiry_date=utcnow() + timedelta(days=5))
        with pytest.raises(InvalidError):
            coupon_service.validate_coupon(db, "SAVE", 500)

    def test_min_purchase_enforced(self, db, make_coupon):
        make_coupon(min_purchase_amount=1000)
        with pytest.raises(InvalidError, match="Minimum purchase"):
            coupon_service.validate_coupon(db, "SAVE", 999)

    def test_unknown_code_not_found(self, db):
        with pytest.raises(NotFoundError):
            coupon_service.validate_coupon(db, "NOPE", 100)

    def test_inactive_coupon_not_found(self, db, make_coupon):
        coupon = make_coupon()
        coupon_service.update_coupon(db, coupon.id, {"status": "inactive"})
        with pytest.raises(NotFoundError):
            coupon_service.validate_coupon(db, "SAVE", 100)


class TestApply:

    def test_increments_used_count(self, db, make_coupon):
        make_coupon()
        coupon = coupon_service.apply_coupon(db, "save")
        assert coupon.used_count == 1
        assert coupon.status == "active"

    def test_reaching_limit_expires_coupon(self, db, make_coupon):
        make_coupon(usage_limit=1)
        coupon = coupon_service.apply_coupon(db, "SAVE")
        assert coupon.status == "expired"
        with pytest.raises(NotFoundError):
            coupon_service.validate_coupon(db, "SAVE", 100)


class TestAdmin:

    def test_code_is_upper_cased(self, make_coupon):
        assert make_coupon(code=" summer10 ").code == "SUMMER10"

    def test_duplicate_code_conflicts(self, make_coupon):
        make_coupon(code="DUP")
        with pytest.raises(ConflictError):
            make_coupon(code="dup")

    def test_percentage_above_100_rejected(self, make_coupon):
        with pytest.raises(InvalidError, match="between 1 and 100"):
            make_coupon(discount_type="percentage", discount_value=150)

    def test_start_after_expiry_rejected(self, make_coupon):
        now = utcnow()
        with pytest.raises(InvalidError, match="after start"):
            make_coupon(start_date=now, expiry_date=now - timedelta(days=1))

    def test_inactive_not_reactivated_by_date_rule(self, db, make_coupon):
        coupon = make_coupon()
        coupon_service.update_coupon(db, coupon.id, {"status": "inactive"})
        coupon_service.update_coupon(db, coupon.id, {"description": "still off"})
        assert coupon_service.get_coupon(db, coupon.id).status == "inactive"

    def test_active_listing_excludes_exhausted_and_inactive(self, db, make_coupon):
        make_coupon(code="LIVE")
        make_coupon(code="USED", usage_limit=1)
        off = make_coupon(code="OFF")
        coupon_service.apply_coupon(db, "USED")
        coupon_service.update_coupon(db, off.id, {"status": "inactive"})
        assert [c.code for c in coupon_service.active_coupons(db)] == ["LIVE"]

    def test_list_filters_by_status(self, db, make_coupon):
        make_coupon(code="A1")
        b = make_coupon(code="B1")
        coupon_service.update_coupon(db, b.id, {"status": "inactive"})
        items, total = coupon_service.list_coupons(db, status="inactive")
        assert total == 1
        assert items[0].code == "B1"

    def test_per_user_limit_is_stored_but_not_enforced(self, db, make_coupon):
        coupon = make_coupon(usage_limit=5, user_usage_limit=1)
        assert coupon.user_usage_limit == 1
        coupon_service.apply_coupon(db, "SAVE")
        assert coupon_service.apply_coupon(db, "SAVE").used_count == 2
