import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from bakery.api.deps import CurrentUser, get_current_user
from bakery.db import get_db
from bakery.schemas.order_schema import CreateOrderIn, OrderOut, PlacedOrderOut
from bakery.services.order_service import OrderService, OrderServiceException

log = logging.getLogger("bakery.api.orders")

router = APIRouter(tags=["orders"])


@router.post("", status_code=201, response_model=PlacedOrderOut, summary="Create order (checkout)")
def create_order(
    payload: CreateOrderIn,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        placed = svc.place_order(user.user_id, payload.address_id, payload.payment)
    except OrderServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        log.exception("checkout crashed for user=%s", user.user_id)
        raise HTTPException(status_code=500, detail="Internal server error")
    return PlacedOrderOut(order_id=placed.order_id, transaction_id=placed.transaction_id)


@router.get("", response_model=List[OrderOut], summary="List my orders")
def list_my_orders(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [OrderOut.model_validate(o) for o in OrderService(db).list_orders_for_user(user.user_id)]
