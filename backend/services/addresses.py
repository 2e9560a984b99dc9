# backend/services/addresses.py
from typing import List

from sqlalchemy.orm import Session

from models.address import Address
from utils.errors import NotFoundError


def _clear_other_defaults(db: Session, user_id: int, keep_id: int) -> None:
    # Runs inside the caller's transaction, before the single commit
    (
        db.query(Address)
        .filter(Address.user_id == user_id, Address.id != keep_id, Address.is_default.is_(True))
        .update({Address.is_default: False}, synchronize_session="fetch")
    )


def list_addresses(db: Session, user_id: int) -> List[Address]:
    return (
        db.query(Address)
        .filter(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.id.desc())
        .all()
    )


def get_address(db: Session, user_id: int, address_id: int) -> Address:
    address = db.query(Address).filter(Address.id == address_id, Address.user_id == user_id).first()
    if not address:
        raise NotFoundError("Address not found")
    return address


def create_address(db: Session, user_id: int, data: dict) -> Address:
    address = Address(user_id=user_id, **data)
    db.add(address)
    db.flush()
    if address.is_default:
        _clear_other_defaults(db, user_id, address.id)
    db.commit()
    db.refresh(address)
    return address


def update_address(db: Session, user_id: int, address_id: int, changes: dict) -> Address:
    address = get_address(db, user_id, address_id)
    for field, value in changes.items():
        setattr(address, field, value)
    if address.is_default:
        _clear_other_defaults(db, user_id, address.id)
    db.commit()
    db.refresh(address)
    return address


def delete_address(db: Session, user_id: int, address_id: int) -> None:
    address = get_address(db, user_id, address_id)
    was_default = address.is_default
    db.delete(address)
    db.flush()

    if was_default:
        successor = (
            db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.id.asc())
            .first()
        )
        if successor:
            successor.is_default = True
    db.commit()


def set_default(db: Session, user_id: int, address_id: int) -> Address:
    address = get_address(db, user_id, address_id)
    _clear_other_defaults(db, user_id, address.id)
    address.is_default = True
    db.commit()
    db.refresh(address)
    return address


def get_default(db: Session, user_id: int) -> Address:
    address = (
        db.query(Address)
        .filter(Address.user_id == user_id, Address.is_default.is_(True))
        .first()
    )
    if address:
        return address

    # No flagged default: promote the first address, if any
    address = db.query(Address).filter(Address.user_id == user_id).order_by(Address.id.asc()).first()
    if not address:
        raise NotFoundError("No addresses found")
    address.is_default = True
    db.commit()
    db.refresh(address)
    return address
