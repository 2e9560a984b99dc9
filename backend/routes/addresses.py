# backend/routes/addresses.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.address import AddressCreate, AddressUpdate, AddressOut
from schemas.common import ApiResponse, ok
from services import addresses as address_service
from utils.audit import write_log
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/addresses", tags=["Addresses"])


@router.get("", response_model=ApiResponse[List[AddressOut]])
def list_addresses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(address_service.list_addresses(db, current_user.id), "Addresses fetched successfully")


@router.get("/default", response_model=ApiResponse[AddressOut])
def default_address(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(address_service.get_default(db, current_user.id), "Default address fetched successfully")


@router.get("/{address_id}", response_model=ApiResponse[AddressOut])
def get_address(address_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(address_service.get_address(db, current_user.id, address_id), "Address fetched successfully")


@router.post("", response_model=ApiResponse[AddressOut], status_code=status.HTTP_201_CREATED)
def create_address(
    payload: AddressCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address = address_service.create_address(db, current_user.id, payload.model_dump())
    write_log(db, user_id=current_user.id, action="ADDRESS_CREATE", resource="addresses",
              request=request, meta={"address_id": address.id, "is_default": address.is_default})
    return ok(address, "Address created successfully", 201)


@router.put("/{address_id}", response_model=ApiResponse[AddressOut])
def update_address(
    address_id: int,
    payload: AddressUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    address = address_service.update_address(db, current_user.id, address_id, changes)
    write_log(db, user_id=current_user.id, action="ADDRESS_UPDATE", resource="addresses",
              request=request, meta={"address_id": address_id})
    return ok(address, "Address updated successfully")


@router.delete("/{address_id}", response_model=ApiResponse[dict])
def delete_address(
    address_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address_service.delete_address(db, current_user.id, address_id)
    write_log(db, user_id=current_user.id, action="ADDRESS_DELETE", resource="addresses",
              request=request, meta={"address_id": address_id})
    return ok({}, "Address deleted successfully")


@router.patch("/{address_id}/set-default", response_model=ApiResponse[AddressOut])
def set_default_address(
    address_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address = address_service.set_default(db, current_user.id, address_id)
    write_log(db, user_id=current_user.id, action="ADDRESS_DEFAULT", resource="addresses",
              request=request, meta={"address_id": address_id})
    return ok(address, "Default address updated successfully")
