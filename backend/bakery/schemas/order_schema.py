from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderIn(BaseModel):
    address_id: int
    payment: dict = Field(default_factory=dict)  # mock gateway, accept free-form dict


class PlacedOrderOut(BaseModel):
    message: str = "Order created and payment successful"
    order_id: int
    transaction_id: str


class OrderAddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    full_name: str
    phone: str
    city: str
    street: str


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int
    title: Optional[str] = None
    quantity: int
    unit_price_cents: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    total_cents: int
    status: str
    payment_status: str
    transaction_id: Optional[str] = None
    created_at: datetime
    address: Optional[OrderAddressOut] = None
    items: List[OrderItemOut] = []


class OrderStatusIn(BaseModel):
    status: Optional[str] = None
    payment_status: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderPageOut(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination
