from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from bakery.models.order import Order, OrderItem


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Order).options(
            selectinload(Order.items), selectinload(Order.address)
        )

    def get(self, order_id: int) -> Optional[Order]:
        return self._query().filter(Order.id == order_id).first()

    def create(self, **fields) -> Order:
        order = Order(**fields)
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, order: Order, product_id: int, title: Optional[str], qty: int, unit_price_cents: int) -> OrderItem:
        oi = OrderItem(
            order_id=order.id,
            product_id=product_id,
            title=title,
            quantity=qty,
            unit_price_cents=unit_price_cents,
        )
        self.db.add(oi)
        self.db.flush()
        return oi

    def list_for_user(self, user_id: int) -> List[Order]:
        return (
            self._query()
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def list(self, page: int = 1, limit: int = 10, status: Optional[str] = None) -> Tuple[List[Order], int]:
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        total = query.with_entities(func.count(Order.id)).scalar() or 0
        items = (
            query.options(selectinload(Order.items), selectinload(Order.address))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total
