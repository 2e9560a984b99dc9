from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

from schemas.common import ORMBase

AddressTypeLiteral = Literal["home", "work", "other"]


class AddressCreate(BaseModel):
    address_line1: str = Field(min_length=5, max_length=200)
    address_line2: Optional[str] = None
    city: str = Field(min_length=2, max_length=50)
    state: str = Field(min_length=2, max_length=50)
    pincode: str = Field(pattern=r"^[1-9][0-9]{5}$")
    country: str = "India"
    phone: Optional[str] = Field(default=None, pattern=r"^[6-9]\d{9}$")
    landmark: Optional[str] = None
    address_type: AddressTypeLiteral = "home"
    is_default: bool = False


class AddressUpdate(BaseModel):
    address_line1: Optional[str] = Field(None, min_length=5, max_length=200)
    address_line2: Optional[str] = None
    city: Optional[str] = Field(None, min_length=2, max_length=50)
    state: Optional[str] = Field(None, min_length=2, max_length=50)
    pincode: Optional[str] = Field(None, pattern=r"^[1-9][0-9]{5}$")
    country: Optional[str] = None
    phone: Optional[str] = Field(None, pattern=r"^[6-9]\d{9}$")
    landmark: Optional[str] = None
    address_type: Optional[AddressTypeLiteral] = None
    is_default: Optional[bool] = None


class AddressOut(ORMBase):
    id: int
    user_id: int
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    country: str
    phone: Optional[str] = None
    landmark: Optional[str] = None
    address_type: str
    is_default: bool
    created_at: Optional[datetime] = None
