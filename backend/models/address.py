# backend/models/address.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, func
from database import Base


class AddressType(str, enum.Enum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"


# A shipping address in a user's address book. At most one per user is the default.
class Address(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    address_line1 = Column(String, nullable=False)
    address_line2 = Column(String, nullable=True)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    pincode = Column(String, nullable=False)
    country = Column(String, nullable=False, default="India")
    phone = Column(String, nullable=True)
    landmark = Column(String, nullable=True)
    address_type = Column(String, nullable=False, default=AddressType.HOME.value)
    is_default = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
