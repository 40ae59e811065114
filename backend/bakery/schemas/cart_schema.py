from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class AddItemIn(BaseModel):
    product_id: int
    quantity: int = Field(1, gt=0)


class UpdateItemIn(BaseModel):
    # zero or negative removes the item
    quantity: int


class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    quantity: int
    unit_price_cents: int
    subtotal_cents: int
    title: Optional[str] = None
    stock: Optional[int] = None


class CartOut(BaseModel):
    cart_id: Optional[int] = None
    cart_uuid: Optional[str] = None
    items: List[CartItemOut] = []
    total_cents: int = 0


class SkippedItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int
    quantity: int
    reason: str


class MergeOut(BaseModel):
    cart: CartOut
    skipped: List[SkippedItemOut] = []


def cart_to_out(cart) -> CartOut:
    if cart is None:
        return CartOut()
    items = [
        CartItemOut(
            id=it.id,
            product_id=it.product_id,
            quantity=it.quantity,
            unit_price_cents=it.unit_price_cents,
            subtotal_cents=it.subtotal_cents,
            title=it.product.title if it.product else None,
            stock=it.product.stock if it.product else None,
        )
        for it in cart.items
    ]
    return CartOut(
        cart_id=cart.id,
        cart_uuid=cart.cart_uuid,
        items=items,
        total_cents=cart.total_cents,
    )
