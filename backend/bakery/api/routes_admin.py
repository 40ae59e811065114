from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from bakery.api.deps import require_admin
from bakery.db import get_db
from bakery.schemas.order_schema import OrderOut, OrderPageOut, OrderStatusIn, Pagination
from bakery.services.order_service import OrderService, OrderServiceException

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/orders", response_model=OrderPageOut, summary="List all orders")
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=200),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        orders, pagination = svc.list_orders(page=page, limit=limit, status=status)
    except OrderServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return OrderPageOut(
        orders=[OrderOut.model_validate(o) for o in orders],
        pagination=Pagination(**pagination),
    )


@router.patch("/orders/{order_id}/status", summary="Update order / payment status")
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    db: Session = Depends(get_db),
):
    svc = OrderService(db)
    try:
        order = svc.set_order_status(order_id, payload.status, payload.payment_status)
    except OrderServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {
        "message": "Order updated successfully",
        "order": OrderOut.model_validate(order),
    }
