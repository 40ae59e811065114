from typing import Optional

from bakery.api.deps import CurrentUser, get_current_user, get_optional_user
from bakery.db import get_db
from bakery.schemas.cart_schema import (
    AddItemIn,
    CartItemOut,
    MergeOut,
    SkippedItemOut,
    UpdateItemIn,
    cart_to_out,
)
from bakery.services.cart_merge_service import CartMergeService
from bakery.services.cart_service import CartService, CartServiceException
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

router = APIRouter(prefix="/api/cart", tags=["cart"])

CART_COOKIE = "cart_uuid"


def _get_cart_uuid_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(CART_COOKIE)


def _user_id(user: Optional[CurrentUser]) -> Optional[int]:
    return user.user_id if user else None


def _http_error(e: CartServiceException) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", summary="Get cart")
def get_cart(
    request: Request,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = svc.get_cart(user_id=_user_id(user), cart_uuid=_get_cart_uuid_cookie(request))
    return cart_to_out(cart)


@router.post("/items", status_code=201, summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    request: Request,
    response: Response,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = svc.get_or_create_cart(user_id=_user_id(user), cart_uuid=_get_cart_uuid_cookie(request))
    try:
        item = svc.add_item(cart, payload.product_id, payload.quantity)
    except CartServiceException as e:
        raise _http_error(e)
    if cart.is_guest:
        response.set_cookie(CART_COOKIE, cart.cart_uuid, httponly=False, samesite="Lax")
    return CartItemOut(
        id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        unit_price_cents=item.unit_price_cents,
        subtotal_cents=item.subtotal_cents,
    )


@router.patch("/items/{item_id}", summary="Change item quantity")
def update_item(
    item_id: int,
    payload: UpdateItemIn,
    request: Request,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = svc.get_cart(user_id=_user_id(user), cart_uuid=_get_cart_uuid_cookie(request))
    if cart is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    try:
        svc.update_quantity(cart, item_id, payload.quantity)
    except CartServiceException as e:
        raise _http_error(e)
    return {"message": "Cart item updated successfully"}


@router.delete("/items/{item_id}", summary="Remove item")
def remove_item(
    item_id: int,
    request: Request,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = svc.get_cart(user_id=_user_id(user), cart_uuid=_get_cart_uuid_cookie(request))
    if cart is not None:
        svc.remove_item(cart, item_id)
    return {"ok": True}


@router.delete("", summary="Clear cart")
def clear_cart(
    request: Request,
    response: Response,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = svc.get_cart(user_id=_user_id(user), cart_uuid=_get_cart_uuid_cookie(request))
    if cart is not None:
        svc.clear(cart)
    if user is None:
        response.delete_cookie(CART_COOKIE)
    return {"ok": True}


@router.post("/merge", summary="Merge the guest cart into the signed-in user's cart")
def merge_guest_cart(
    request: Request,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = CartMergeService(db).merge(user.user_id, _get_cart_uuid_cookie(request))
    response.delete_cookie(CART_COOKIE)
    return MergeOut(
        cart=cart_to_out(result.cart),
        skipped=[SkippedItemOut.model_validate(s) for s in result.skipped],
    )
