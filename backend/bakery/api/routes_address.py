from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bakery.api.deps import CurrentUser, get_current_user
from bakery.db import get_db
from bakery.schemas.address_schema import AddressIn, AddressOut
from bakery.services.address_service import AddressService

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


@router.post("", status_code=201, summary="Create address")
def create_address(
    payload: AddressIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    a = AddressService(db).create_address(user.user_id, payload.model_dump())
    return {"address": AddressOut.model_validate(a)}


@router.get("", response_model=List[AddressOut], summary="List my addresses")
def list_addresses(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return AddressService(db).list_addresses(user.user_id)
