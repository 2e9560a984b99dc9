"""Address book: exactly one default per user, owner scoping."""
import pytest

from models.address import Address
from services import addresses as address_service
from utils.errors import NotFoundError


def _defaults(db, user):
    db.expire_all()
    return db.query(Address).filter(Address.user_id == user.id, Address.is_default.is_(True)).all()


def _data(**overrides):
    data = {
        "address_line1": "221B Baker Street",
        "city": "Mumbai",
        "state": "Maharashtra",
        "pincode": "400001",
        "country": "India",
        "phone": "9123456789",
        "address_type": "home",
        "is_default": False,
    }
    data.update(overrides)
    return data


class TestDefaultInvariant:

    def test_set_default_swaps_flag(self, db, customer, make_address):
        a = make_address(customer, is_default=True)
        b = make_address(customer)

        address_service.set_default(db, customer.id, b.id)

        defaults = _defaults(db, customer)
        assert [d.id for d in defaults] == [b.id]
        assert db.get(Address, a.id).is_default is False

    def test_create_default_clears_siblings(self, db, customer, make_address):
        make_address(customer, is_default=True)
        created = address_service.create_address(db, customer.id, _data(is_default=True))
        assert [d.id for d in _defaults(db, customer)] == [created.id]

    def test_update_to_default_clears_siblings(self, db, customer, make_address):
        make_address(customer, is_default=True)
        b = make_address(customer)
        address_service.update_address(db, customer.id, b.id, {"is_default": True})
        assert [d.id for d in _defaults(db, customer)] == [b.id]

    def test_other_users_default_untouched(self, db, customer, make_user, make_address):
        other = make_user()
        theirs = make_address(other, is_default=True)
        mine = make_address(customer)
        address_service.set_default(db, customer.id, mine.id)
        assert [d.id for d in _defaults(db, other)] == [theirs.id]

    def test_deleting_default_promotes_another(self, db, customer, make_address):
        a = make_address(customer, is_default=True)
        b = make_address(customer)
        address_service.delete_address(db, customer.id, a.id)
        assert [d.id for d in _defaults(db, customer)] == [b.id]

    def test_deleting_last_address(self, db, customer, make_address):
        a = make_address(customer, is_default=True)
        address_service.delete_address(db, customer.id, a.id)
        assert address_service.list_addresses(db, customer.id) == []


class TestGetDefault:

    def test_promotes_first_when_none_flagged(self, db, customer, make_address):
        first = make_address(customer)
        make_address(customer)
        default = address_service.get_default(db, customer.id)
        assert default.id == first.id
        assert [d.id for d in _defaults(db, customer)] == [first.id]

    def test_not_found_without_addresses(self, db, customer):
        with pytest.raises(NotFoundError):
            address_service.get_default(db, customer.id)


class TestOwnership:

    def test_foreign_address_is_not_found(self, db, customer, make_user, make_address):
        other = make_user()
        theirs = make_address(other)
        with pytest.raises(NotFoundError):
            address_service.get_address(db, customer.id, theirs.id)
        with pytest.raises(NotFoundError):
            address_service.set_default(db, customer.id, theirs.id)
        with pytest.raises(NotFoundError):
            address_service.delete_address(db, customer.id, theirs.id)

    def test_list_is_scoped_and_default_first(self, db, customer, make_user, make_address):
        make_address(make_user())
        plain = make_address(customer)
        default = make_address(customer, is_default=True)
        listed = address_service.list_addresses(db, customer.id)
        assert [a.id for a in listed] == [default.id, plain.id]
